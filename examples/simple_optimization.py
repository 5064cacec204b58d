"""
Simple Single-Objective Optimization Example

This example demonstrates stepping a bo-engine run by hand on a
Python objective.
"""

import numpy as np

from bo_engine import BORunner, Domain, InitialDesign, RunConfig
from bo_engine.plugins.builtin import (
    ExpectedImprovement,
    FunctionOracle,
    Matern52Kernel,
    MultiStartLocalSearch,
)


def objective_function(x: np.ndarray) -> float:
    """
    Rosenbrock function (classic optimization benchmark).
    Minimum at (1, 1) with value 0.
    """
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def main():
    domain = Domain.continuous([(-2.0, 2.0), (-1.0, 3.0)])

    config = RunConfig(
        domain=domain,
        kernel=Matern52Kernel(),
        kernel_params={"lengthscale": 0.8, "variance": 1.0},
        acquisition=ExpectedImprovement(),
        optimizer=MultiStartLocalSearch(),
        optimizer_params={"restarts": 8, "step_size": 0.05},
        oracle=FunctionOracle(objective_function, domain, name="rosenbrock"),
        initial_design=InitialDesign(method="sobol", n=8),
        budget=30,
        seed=7,
    )
    runner = BORunner(config)

    print("=== Optimization Loop ===")
    best_value = float("inf")
    while runner.step():
        state = runner.get_state()
        x, y = state.dataset.X[-1], state.dataset.y[-1]
        marker = " (NEW BEST)" if y < best_value else ""
        best_value = min(best_value, y)
        print(f"Step {state.step}: x={x[0]:.3f}, y={x[1]:.3f} -> z={y:.3f}{marker}")

    # Final results
    state = runner.get_state()
    print("\n=== Final Results ===")
    print(f"Total observations: {len(state.dataset)}")
    print(f"Best inputs: x={state.best_x[0]:.4f}, y={state.best_x[1]:.4f}")
    print(f"Best value: z={state.best_so_far:.4f}")
    print("True minimum: (1, 1) -> 0")


if __name__ == "__main__":
    main()
