"""Sequential, fail-fast step runner with explicit step-output threading."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Protocol, TypeAlias, runtime_checkable

from asset_inliner.application.options import PipelineOptions
from asset_inliner.application.results import BuildResult
from asset_inliner.errors import StepContractError, StepFailedError
from asset_inliner.types import OrchestratorState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Step result plus the value it hands to later steps."""

    result: BuildResult
    output: object | None = None


class BuildContext:
    """Per-run inputs plus the outputs steps have published so far.

    Each output key is owned by the step that declared it in ``provides`` and
    can be written once. A context belongs to exactly one pipeline run.

    Parameters
    ----------
    output_dir : Path
        Directory holding the generated documents and assets.
    options : PipelineOptions | None, default=None
        Pipeline configuration.
    """

    def __init__(self, output_dir: Path, options: PipelineOptions | None = None) -> None:
        self._output_dir = Path(output_dir)
        self._options = options or PipelineOptions()
        self._outputs: dict[str, object] = {}
        self._owners: dict[str, str] = {}

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def options(self) -> PipelineOptions:
        return self._options

    @property
    def outputs(self) -> Mapping[str, object]:
        return MappingProxyType(self._outputs)

    def owner_of(self, key: str) -> str | None:
        return self._owners.get(key)

    def publish(self, step_name: str, key: str, value: object) -> None:
        """Record ``value`` under ``key`` on behalf of ``step_name``.

        Raises
        ------
        StepContractError
            If ``key`` was already written, by this step or another.
        """
        owner = self._owners.get(key)
        if owner is not None:
            raise StepContractError(
                f"Step '{step_name}' cannot write '{key}': already written by '{owner}'."
            )
        self._outputs[key] = value
        self._owners[key] = step_name


class StepInputs(Mapping[str, object]):
    """Read-only view exposing only the outputs a step declared as inputs."""

    def __init__(self, step_name: str, context: BuildContext, allowed: Sequence[str]) -> None:
        self._step_name = step_name
        self._context = context
        self._allowed = tuple(allowed)

    def __getitem__(self, key: str) -> object:
        if key not in self._allowed:
            raise StepContractError(
                f"Step '{self._step_name}' read undeclared input '{key}'."
            )
        try:
            return self._context.outputs[key]
        except KeyError as exc:
            raise StepContractError(
                f"Step '{self._step_name}' requires '{key}' but no step produced it."
            ) from exc

    def __iter__(self) -> Iterator[str]:
        return (key for key in self._allowed if key in self._context.outputs)

    def __len__(self) -> int:
        return sum(1 for _ in self)


StepReturn: TypeAlias = StepOutcome | BuildResult | None


@runtime_checkable
class Step(Protocol):
    """A named unit of pipeline work."""

    name: str
    requires: tuple[str, ...]
    provides: str | None

    async def run(self, context: BuildContext, inputs: StepInputs) -> StepReturn:
        """Execute the step."""


@dataclass(frozen=True)
class FunctionStep:
    """Adapt a coroutine function into a :class:`Step`."""

    name: str
    fn: Callable[[BuildContext, StepInputs], Awaitable[StepReturn]]
    requires: tuple[str, ...] = ()
    provides: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Step name cannot be empty")
        if not callable(self.fn):
            raise TypeError(f"Step fn must be callable (type={type(self.fn).__name__})")
        object.__setattr__(self, "requires", tuple(self.requires))

    async def run(self, context: BuildContext, inputs: StepInputs) -> StepReturn:
        return await self.fn(context, inputs)


def validate_chain(steps: Sequence[Step]) -> None:
    """Check names are unique and every input is provided by an earlier step.

    Raises
    ------
    StepContractError
        On duplicate names, duplicate outputs, or unsatisfied inputs.
    """
    names: set[str] = set()
    provided: dict[str, str] = {}
    for step in steps:
        if step.name in names:
            raise StepContractError(f"Duplicate step name '{step.name}'.")
        names.add(step.name)
        for key in step.requires:
            if key not in provided:
                raise StepContractError(
                    f"Step '{step.name}' requires '{key}', "
                    "which no earlier step provides."
                )
        if step.provides is not None:
            if step.provides in provided:
                raise StepContractError(
                    f"Output '{step.provides}' is provided by both "
                    f"'{provided[step.provides]}' and '{step.name}'."
                )
            provided[step.provides] = step.name


@dataclass
class _Aggregate:
    emitted_files: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def absorb(self, result: BuildResult) -> None:
        self.emitted_files.extend(result.emitted_files)
        self.warnings.extend(result.warnings)

    def success(self) -> BuildResult:
        return BuildResult.success(self.emitted_files, self.warnings)

    def failure(self, error: BaseException) -> BuildResult:
        return BuildResult.failure(error, self.emitted_files, self.warnings)


class StepOrchestrator:
    """Run steps strictly in order, stopping at the first failure.

    Emitted files and warnings are concatenated in step order. When a step
    returns an error, raises, or returns nothing, no later step runs and the
    aggregate carries that step's error. An orchestrator runs once; its final
    result stays available through :meth:`last_result`.

    Parameters
    ----------
    steps : Sequence[Step]
        Steps to run, in order.
    """

    def __init__(self, steps: Sequence[Step]) -> None:
        validate_chain(steps)
        self._steps = tuple(steps)
        self._state = OrchestratorState.IDLE
        self._current: int | None = None
        self._last_result: BuildResult | None = None

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def current_step(self) -> int | None:
        """One-based index of the running (or last run) step."""
        return self._current

    def last_result(self) -> BuildResult | None:
        """Return the aggregate result of the finished run, if any."""
        return self._last_result

    async def run(self, context: BuildContext) -> BuildResult:
        """Execute every step against ``context``.

        Raises
        ------
        StepContractError
            If this orchestrator already ran.
        """
        if self._state is not OrchestratorState.IDLE:
            raise StepContractError(
                f"Orchestrator already {self._state.value}; create a new one per run."
            )
        self._state = OrchestratorState.RUNNING
        aggregate = _Aggregate()

        for index, step in enumerate(self._steps, start=1):
            self._current = index
            logger.info("step %d/%d: %s", index, len(self._steps), step.name)
            error = await self._run_step(step, context, aggregate)
            if error is not None:
                logger.error("pipeline failed during step '%s': %s", step.name, error)
                return self._finish(OrchestratorState.FAILED, aggregate.failure(error))

        return self._finish(OrchestratorState.SUCCEEDED, aggregate.success())

    async def _run_step(
        self,
        step: Step,
        context: BuildContext,
        aggregate: _Aggregate,
    ) -> BaseException | None:
        inputs = StepInputs(step.name, context, step.requires)
        try:
            returned = await step.run(context, inputs)
        except Exception as exc:
            return exc

        if not returned:
            return StepFailedError(f"Step '{step.name}' returned no result.")
        outcome = returned if isinstance(returned, StepOutcome) else StepOutcome(returned)

        if not outcome.result.ok:
            # Only completed steps contribute to the aggregate.
            for warning in outcome.result.warnings:
                logger.warning("[%s] %s", step.name, warning)
            return outcome.result.error or StepFailedError(f"Step '{step.name}' failed.")

        if step.provides is not None:
            try:
                context.publish(step.name, step.provides, outcome.output)
            except StepContractError as exc:
                return exc
        elif outcome.output is not None:
            return StepContractError(
                f"Step '{step.name}' returned an output but declares no 'provides' key."
            )
        aggregate.absorb(outcome.result)
        return None

    def _finish(self, state: OrchestratorState, result: BuildResult) -> BuildResult:
        self._state = state
        self._last_result = result
        return result
