"""
bo-engine Runner

Step-wise Bayesian optimization loop. Each step either evaluates the
next point of the precomputed initial design, or fits a fresh GP,
asks the optimizer for one candidate maximizing the acquisition, and
evaluates it.
"""

from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence
import asyncio
import copy
import hashlib
import inspect
import json
import logging

import numpy as np
import pandas as pd

from bo_engine.config import get_settings
from bo_engine.core.ledger import DoneReason, EventLedger, EventType
from bo_engine.exceptions import PluginContractViolation
from bo_engine.gp import GaussianProcess, GPConfig
from bo_engine.plugins.base import (
    AcquisitionPlugin,
    AcquisitionScorer,
    KernelPlugin,
    OptimizerPlugin,
    OraclePlugin,
)
from bo_engine.sampling import generate_initial_design
from bo_engine.spec.models import DesignMethod, Domain
from bo_engine.spec.validators import validate_domain, validate_point
from bo_engine.types import (
    Dataset,
    NumericsContext,
    Observation,
    OracleResult,
    RunContext,
)
from bo_engine.utils.rng import SeededRNG

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class InitialDesign:
    """Initial design-of-experiments settings."""

    method: DesignMethod | str = DesignMethod.LHS
    n: int = 5


def _setting(name: str):
    return field(default_factory=lambda: getattr(get_settings(), name))


@dataclass
class RunConfig:
    """
    Construction-time configuration of a run.

    Plugins are passed as ready instances; their parameters travel
    separately so the same instance can serve several runs.
    """

    domain: Domain
    kernel: KernelPlugin
    acquisition: AcquisitionPlugin
    optimizer: OptimizerPlugin
    oracle: OraclePlugin
    kernel_params: Dict[str, Any] = field(default_factory=dict)
    acquisition_params: Dict[str, Any] = field(default_factory=dict)
    optimizer_params: Dict[str, Any] = field(default_factory=dict)
    initial_design: InitialDesign = field(default_factory=InitialDesign)
    budget: int = 30
    noise: float = 0.0
    jitter: float = _setting("jitter")
    seed: int = 0

    # Numerics
    max_jitter_tries: int = _setting("max_jitter_tries")
    max_condition: float = _setting("max_condition")
    solve_tolerance: float = _setting("solve_tolerance")

    # Design points evaluated per step while draining the initial design
    design_batch: int = 1
    event_log: bool = True


# =============================================================================
# State
# =============================================================================


class RunPhase(str, Enum):
    """Runner lifecycle."""

    NOT_STARTED = "not_started"
    INITIAL_DESIGN = "initial_design"
    OPTIMIZING = "optimizing"
    DONE = "done"


def _same_value(a: Any, b: Any) -> bool:
    """Structural equality that also compares numpy arrays inside containers."""
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return np.array_equal(a, b)
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_same_value(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return (
            type(a) is type(b)
            and len(a) == len(b)
            and all(_same_value(x, y) for x, y in zip(a, b))
        )
    return bool(a == b)


@dataclass(eq=False)
class RunState:
    """
    Run state as seen by callers.

    ``step`` counts oracle evaluations. ``best_history[i]`` is the best
    value after evaluation ``i + 1`` and never increases.
    """

    dataset: Dataset = field(default_factory=Dataset)
    step: int = 0
    best_so_far: float = float("inf")
    best_x: Optional[np.ndarray] = None
    optimizer_state: Any = None
    phase: RunPhase = RunPhase.NOT_STARTED
    done_reason: Optional[DoneReason] = None
    best_history: List[float] = field(default_factory=list)

    def snapshot(self) -> "RunState":
        """Deep copy; mutating it never reaches the runner."""
        return copy.deepcopy(self)

    @property
    def is_done(self) -> bool:
        return self.phase == RunPhase.DONE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RunState):
            return NotImplemented
        if (self.best_x is None) != (other.best_x is None):
            return False
        return (
            self.dataset == other.dataset
            and self.step == other.step
            and self.best_so_far == other.best_so_far
            and (self.best_x is None or np.array_equal(self.best_x, other.best_x))
            and _same_value(self.optimizer_state, other.optimizer_state)
            and self.phase == other.phase
            and self.done_reason == other.done_reason
            and self.best_history == other.best_history
        )

    def to_dataframe(self, names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """
        One row per evaluation, in order.

        Args:
            names: Column names for the point coordinates

        Returns:
            DataFrame with columns ``step``, the coordinates, ``y``,
            ``noise`` and ``best_so_far``
        """
        X, y = self.dataset.as_arrays()
        if names is None:
            names = [f"x{i + 1}" for i in range(X.shape[1])]

        df = pd.DataFrame(X, columns=list(names))
        df.insert(0, "step", np.arange(1, len(y) + 1))
        df["y"] = y
        df["noise"] = self.dataset.noise
        df["best_so_far"] = self.best_history
        return df


@dataclass
class _Pending:
    """Points chosen by a step, waiting on the oracle."""

    points: np.ndarray
    guided: bool


# =============================================================================
# Runner
# =============================================================================


class BORunner:
    """
    Bayesian optimization runner.

    Single-threaded: at most one oracle evaluation is in flight. ``step``
    and ``astep`` share the same state machine; ``astep`` awaits async
    oracles on the caller's event loop, ``step`` resolves them with
    ``asyncio.run``.

    Example:
        runner = BORunner(config)
        while runner.step():
            print(runner.get_state().best_so_far)
    """

    def __init__(self, config: RunConfig):
        """
        Initialize runner.

        Validates the domain, computes the full initial design and
        initializes optimizer state. No oracle calls happen here.

        Args:
            config: Run configuration
        """
        self.config = config
        self.domain = validate_domain(config.domain)
        self.rng = SeededRNG(config.seed)
        self.ledger = EventLedger(enabled=config.event_log)

        if config.budget < 0:
            raise ValueError(f"budget must be non-negative, got {config.budget}")
        if config.design_batch < 1:
            raise ValueError(f"design_batch must be at least 1, got {config.design_batch}")

        design = generate_initial_design(
            config.initial_design.method,
            self.domain,
            config.initial_design.n,
            self.rng,
        )
        for x in design:
            validate_point(x, self.domain)
        self._design = np.asarray(design, dtype=float).reshape(-1, self.domain.n_dims)
        self._design_cursor = 0

        self._state = RunState()
        self._posterior: Optional[GaussianProcess] = None
        self._in_flight = False

        self._state.optimizer_state = config.optimizer.initialize(
            self._state.dataset,
            self.domain,
            self._context(),
            config.optimizer_params,
        )

        self.ledger.record(
            EventType.INIT_RUN,
            0,
            domain=self.domain.model_dump(mode="json"),
            seed=config.seed,
            initial_design=self._design,
            parameters={
                "kernel": config.kernel.name,
                "kernel_params": config.kernel_params,
                "acquisition": config.acquisition.name,
                "acquisition_params": config.acquisition_params,
                "optimizer": config.optimizer.name,
                "optimizer_params": config.optimizer_params,
                "oracle": config.oracle.name,
                "budget": config.budget,
                "noise": config.noise,
                "jitter": config.jitter,
            },
        )

        logger.info(
            f"Created run: budget={config.budget}, "
            f"design={DesignMethod(config.initial_design.method).value} x{len(self._design)}, "
            f"seed={config.seed}"
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def get_state(self) -> RunState:
        """Snapshot of the current state."""
        return self._state.snapshot()

    @property
    def events(self) -> EventLedger:
        return self.ledger

    @property
    def posterior(self) -> Optional[GaussianProcess]:
        """GP fitted by the latest guided step, if any."""
        return self._posterior

    @property
    def initial_design(self) -> np.ndarray:
        return self._design.copy()

    @property
    def is_done(self) -> bool:
        return self._state.is_done

    def annotate(self, note: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Add a free-form note to the event log."""
        self.ledger.annotate(note, step=self._state.step, metadata=metadata)

    def to_dataframe(self) -> pd.DataFrame:
        """Evaluations so far, with columns named after the domain."""
        return self._state.to_dataframe(self.domain.names)

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def step(self) -> bool:
        """
        Advance the run by one step.

        Returns:
            True if work was done, False once the run is finished
            (budget exhausted or no candidate proposed)
        """
        self._enter()
        try:
            pending = self._prepare()
            if pending is None:
                return False
            results = self._resolve(self._evaluate(pending))
            self._commit(pending, results)
            return True
        finally:
            self._in_flight = False

    async def astep(self) -> bool:
        """Async ``step``; awaits the oracle if it returns an awaitable."""
        self._enter()
        try:
            pending = self._prepare()
            if pending is None:
                return False
            output = self._evaluate(pending)
            if inspect.isawaitable(output):
                output = await output
            self._commit(pending, output)
            return True
        finally:
            self._in_flight = False

    def run(self) -> RunState:
        """Step until done and return the final state."""
        while self.step():
            pass
        return self.get_state()

    async def arun(self) -> RunState:
        """Async ``run``."""
        while await self.astep():
            pass
        return self.get_state()

    # -------------------------------------------------------------------------
    # Step phases
    # -------------------------------------------------------------------------

    def _enter(self) -> None:
        if self._in_flight:
            raise RuntimeError("Runner is already evaluating; steps cannot overlap")
        self._in_flight = True

    def _context(self) -> RunContext:
        return RunContext(
            step=self._state.step,
            budget=self.config.budget,
            domain=self.domain,
            rng=self.rng.as_context(),
            numerics=NumericsContext(
                jitter=self.config.jitter,
                tolerance=self.config.solve_tolerance,
                max_condition=self.config.max_condition,
            ),
        )

    def _prepare(self) -> Optional[_Pending]:
        """Pick the points this step evaluates, or finish the run."""
        state = self._state
        if state.phase == RunPhase.DONE:
            return None

        if state.step >= self.config.budget:
            self._finish(DoneReason.BUDGET_EXHAUSTED)
            return None

        # Drain the precomputed design in order
        if self._design_cursor < len(self._design):
            state.phase = RunPhase.INITIAL_DESIGN
            count = min(
                self.config.design_batch,
                len(self._design) - self._design_cursor,
                self.config.budget - state.step,
            )
            points = self._design[self._design_cursor:self._design_cursor + count]
            return _Pending(points=points.copy(), guided=False)

        state.phase = RunPhase.OPTIMIZING
        posterior = self._fit()
        context = self._context()
        scorer = self._make_scorer(posterior, context)

        candidates = self._check_candidates(
            self.config.optimizer.ask(
                1,
                scorer,
                self.domain,
                context,
                self.config.optimizer_params,
                state.optimizer_state,
            ),
            k=1,
        )
        self.ledger.record(
            EventType.ASK,
            state.step,
            acquisition=self.config.acquisition.name,
            optimizer=self.config.optimizer.name,
            candidates=candidates,
        )

        if len(candidates) == 0:
            self._finish(DoneReason.NO_CANDIDATE)
            return None

        x_next = validate_point(candidates[0], self.domain)
        return _Pending(points=x_next.reshape(1, -1), guided=True)

    def _evaluate(self, pending: _Pending) -> Any:
        self.config.oracle.bind_rng(self.rng)
        return self.config.oracle.evaluate(pending.points.copy())

    def _commit(self, pending: _Pending, output: Any) -> None:
        """Record oracle results and advance the state."""
        state = self._state
        results = self._check_results(output, len(pending.points))

        for x, result in zip(pending.points, results):
            y = float(result.y)
            step = state.step + 1

            # tell may raise; nothing below it is applied until it returns
            optimizer_state = state.optimizer_state
            if pending.guided:
                optimizer_state = self.config.optimizer.tell(
                    Observation(x=x.copy(), y=y, noise=result.noise_std, step=step),
                    copy.deepcopy(state.optimizer_state),
                )

            state.dataset.append(x, y, result.noise_std)
            state.step = step
            state.optimizer_state = optimizer_state
            if not pending.guided:
                self._design_cursor += 1
            if y < state.best_so_far:
                state.best_so_far = y
                state.best_x = x.copy()
            state.best_history.append(state.best_so_far)

            self.ledger.record(
                EventType.EVAL,
                state.step,
                oracle=self.config.oracle.name,
                x=x,
                y=y,
                noise=result.noise_std,
            )
            if pending.guided:
                self.ledger.record(
                    EventType.TELL,
                    state.step,
                    dataset_size=len(state.dataset),
                    dataset_hash=self.dataset_hash(),
                )

            logger.info(
                f"Step {state.step}/{self.config.budget}: y={y:.6g}, "
                f"best={state.best_so_far:.6g}"
                + ("" if pending.guided else " (initial design)")
            )

    def _finish(self, reason: DoneReason) -> None:
        state = self._state
        state.phase = RunPhase.DONE
        state.done_reason = reason
        self.ledger.record(
            EventType.DONE,
            state.step,
            reason=reason,
            final_best=state.best_so_far,
            best_x=state.best_x,
        )
        logger.info(
            f"Run finished ({reason.value}) after {state.step} evaluations, "
            f"best={state.best_so_far:.6g}"
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _fit(self) -> GaussianProcess:
        self._posterior = GaussianProcess(
            self._state.dataset,
            GPConfig(
                kernel=self.config.kernel,
                hyperparameters=self.config.kernel_params,
                noise=self.config.noise,
                jitter=self.config.jitter,
                domain=self.domain,
                max_jitter_tries=self.config.max_jitter_tries,
                max_condition=self.config.max_condition,
            ),
        )
        info = self._posterior.info()
        self.ledger.record(
            EventType.FIT_SURROGATE,
            self._state.step,
            kernel=self.config.kernel.name,
            hyperparameters=self.config.kernel_params,
            conditioning=info.conditioning,
            diagnostics=info.diagnostics,
        )
        return self._posterior

    def _make_scorer(self, posterior: GaussianProcess, context: RunContext) -> AcquisitionScorer:
        acquisition = self.config.acquisition
        params = self.config.acquisition_params
        n_dims = self.domain.n_dims

        def scorer(candidates: np.ndarray) -> np.ndarray:
            candidates = np.atleast_2d(np.asarray(candidates, dtype=float))
            if candidates.shape[1] != n_dims:
                raise PluginContractViolation(
                    self.config.optimizer.name,
                    f"scored candidates of shape {candidates.shape}, "
                    f"expected {n_dims} columns",
                )
            scores = np.asarray(
                acquisition.score(candidates, posterior, context, params), dtype=float
            )
            if scores.shape != (candidates.shape[0],):
                raise PluginContractViolation(
                    acquisition.name,
                    f"score returned shape {scores.shape}, "
                    f"expected ({candidates.shape[0]},)",
                )
            return scores

        return scorer

    def _check_candidates(self, candidates: Any, k: int) -> np.ndarray:
        candidates = np.asarray(candidates, dtype=float)
        if candidates.size == 0:
            return np.zeros((0, self.domain.n_dims))
        if candidates.ndim != 2 or candidates.shape[1] != self.domain.n_dims:
            raise PluginContractViolation(
                self.config.optimizer.name,
                f"ask returned shape {candidates.shape}, "
                f"expected (<= {k}, {self.domain.n_dims})",
            )
        if candidates.shape[0] > k:
            raise PluginContractViolation(
                self.config.optimizer.name,
                f"ask returned {candidates.shape[0]} candidates, at most {k} allowed",
            )
        return candidates

    def _check_results(self, output: Any, expected: int) -> List[OracleResult]:
        name = self.config.oracle.name
        if isinstance(output, (OracleResult, Real)):
            output = [output]
        try:
            items = list(output)
        except TypeError as e:
            raise PluginContractViolation(
                name, f"evaluate returned {type(output).__name__}, expected a list"
            ) from e

        if len(items) != expected:
            raise PluginContractViolation(
                name, f"evaluate returned {len(items)} results for {expected} points"
            )

        results = []
        for item in items:
            if isinstance(item, Real):
                item = OracleResult(y=float(item))
            if not isinstance(item, OracleResult):
                raise PluginContractViolation(
                    name, f"evaluate returned {type(item).__name__}, expected OracleResult"
                )
            if not np.isfinite(item.y):
                raise PluginContractViolation(name, f"evaluate returned non-finite value {item.y}")
            results.append(item)
        return results

    @staticmethod
    def _resolve(output: Any) -> Any:
        """Wait for an awaitable oracle result outside any event loop."""
        if not inspect.isawaitable(output):
            return output

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(_await(output))

        if inspect.iscoroutine(output):
            output.close()
        raise RuntimeError(
            "Oracle returned an awaitable inside a running event loop; use astep()/arun()"
        )

    def dataset_hash(self) -> str:
        """Short hash of the current dataset, for reproducibility checks."""
        X, y = self._state.dataset.as_arrays(self.domain.n_dims)
        data_str = json.dumps({
            "X": X.tolist(),
            "y": y.tolist(),
        }, sort_keys=True)
        return hashlib.sha256(data_str.encode()).hexdigest()[:16]


async def _await(awaitable: Any) -> Any:
    return await awaitable
