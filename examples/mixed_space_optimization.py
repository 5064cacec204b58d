"""
Mixed Variable Space Optimization Example

This example demonstrates optimization with mixed variable types:
- Continuous variables
- Integer variables
- Categorical variables

The objective is an async function standing in for a remote instrument,
so the run is driven with ``arun``.
"""

import asyncio

import numpy as np

from bo_engine import BORunner, InitialDesign, RunConfig
from bo_engine.plugins.builtin import (
    FunctionOracle,
    LowerConfidenceBound,
    Matern52Kernel,
    MultiStartLocalSearch,
)
from bo_engine.spec.models import (
    CategoricalDimension,
    ContinuousDimension,
    Domain,
    IntegerDimension,
)

DOMAIN = Domain(
    dimensions=[
        ContinuousDimension(name="temperature", bounds=(300.0, 800.0)),  # Kelvin
        ContinuousDimension(name="pressure", bounds=(1.0, 50.0)),  # bar
        IntegerDimension(name="n_layers", bounds=(1, 10)),
        CategoricalDimension(name="material", levels=["silicon", "germanium", "gallium_arsenide"]),
    ]
)

MATERIAL_OFFSET = {"silicon": 0.0, "germanium": 0.15, "gallium_arsenide": -0.1}


async def measure_defect_rate(x: np.ndarray) -> float:
    """Simulated synthesis run; lower is better."""
    await asyncio.sleep(0.01)
    params = DOMAIN.decode(x)

    t = (params["temperature"] - 620.0) / 500.0
    p = (params["pressure"] - 12.0) / 49.0
    layers = (params["n_layers"] - 4) / 9.0
    return 4 * t**2 + 2 * p**2 + layers**2 + MATERIAL_OFFSET[params["material"]]


async def main():
    config = RunConfig(
        domain=DOMAIN,
        kernel=Matern52Kernel(),
        kernel_params={"lengthscale": [100.0, 10.0, 3.0, 1.0], "variance": 1.0},
        acquisition=LowerConfidenceBound(),
        acquisition_params={"beta": 2.0},
        optimizer=MultiStartLocalSearch(),
        optimizer_params={"restarts": 6, "step_size": 5.0},
        oracle=FunctionOracle(measure_defect_rate, DOMAIN, name="synthesis"),
        initial_design=InitialDesign(method="lhs", n=6),
        budget=20,
        seed=11,
    )
    runner = BORunner(config)

    state = await runner.arun()

    print("=== Final Results ===")
    print(f"Total observations: {len(state.dataset)}")
    print(f"Best conditions: {DOMAIN.decode(state.best_x)}")
    print(f"Best defect rate: {state.best_so_far:.4f}")
    print()
    print(runner.to_dataframe().tail())


if __name__ == "__main__":
    asyncio.run(main())
