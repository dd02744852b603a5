"""Dependency-ordered, concurrent execution of workflow steps."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from typing import Iterable, Mapping


class Step(ABC):
    """A unit of work that can be scheduled by a workflow."""

    name: str = "step"

    @abstractmethod
    def do(self) -> None:
        """Perform the step, raising an exception on failure."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class WorkflowNotBuiltError(RuntimeError):
    """Raised when an orchestrator is run before it was built."""

    def __init__(self, message: str = "workflow not built") -> None:
        super().__init__(message)


class WorkflowError(Exception):
    """Raised when a workflow cannot run or one of its steps fails."""

    def __init__(
        self,
        message: str,
        errors: Mapping[Step, BaseException] | None = None,
        skipped: Iterable[Step] = (),
    ) -> None:
        self.errors: dict[Step, BaseException] = dict(errors or {})
        self.skipped: list[Step] = list(skipped)
        detail = "; ".join(f"{s.name}: {e}" for s, e in self.errors.items())
        super().__init__(f"{message}: {detail}" if detail else message)


def _unwrap(item: Step | StepSpec) -> Step:
    return item.step if isinstance(item, StepSpec) else item


@dataclass(eq=False)
class StepSpec:
    """A step together with the steps it must wait for."""

    step: Step
    upstreams: list[Step] = field(default_factory=list)

    def depends_on(self, *args: Step | StepSpec) -> StepSpec:
        """Make this step run only after the given steps succeeded."""
        for item in args:
            upstream = _unwrap(item)
            if upstream not in self.upstreams:
                self.upstreams.append(upstream)
        return self


def step(step: Step) -> StepSpec:
    """Wrap a step so that dependencies can be declared on it."""
    return StepSpec(step)


class Workflow:
    """A directed acyclic graph of steps, run concurrently in dependency order."""

    def __init__(self, max_workers: int | None = None) -> None:
        self._upstreams: dict[Step, list[Step]] = {}
        self._max_workers = max_workers

    @property
    def steps(self) -> list[Step]:
        return list(self._upstreams)

    def upstreams_of(self, target: Step) -> list[Step]:
        return list(self._upstreams[target])

    def add(self, spec: StepSpec | Step) -> Workflow:
        """Add a step and its upstream steps to the graph."""
        if not isinstance(spec, StepSpec):
            spec = StepSpec(spec)
        dependencies = self._upstreams.setdefault(spec.step, [])
        for upstream in spec.upstreams:
            self._upstreams.setdefault(upstream, [])
            if upstream not in dependencies:
                dependencies.append(upstream)
        return self

    def run(self) -> None:
        """Run every step; steps whose upstreams did not all succeed are skipped."""
        sorter = TopologicalSorter({s: list(ups) for s, ups in self._upstreams.items()})
        try:
            sorter.prepare()
        except CycleError as exc:
            cycle = exc.args[1] if len(exc.args) > 1 else []
            names = " -> ".join(s.name for s in cycle)
            raise WorkflowError(f"dependency cycle detected: {names}") from exc

        if not self._upstreams:
            return

        succeeded: set[Step] = set()
        failed: dict[Step, BaseException] = {}
        skipped: list[Step] = []
        running: dict[Future[None], Step] = {}

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            while sorter.is_active():
                for ready in sorter.get_ready():
                    if all(u in succeeded for u in self._upstreams[ready]):
                        running[pool.submit(ready.do)] = ready
                    else:
                        skipped.append(ready)
                        sorter.done(ready)
                if not running:
                    continue
                finished, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in finished:
                    completed = running.pop(future)
                    error = future.exception()
                    if error is None:
                        succeeded.add(completed)
                    else:
                        failed[completed] = error
                    sorter.done(completed)

        if failed:
            raise WorkflowError("workflow failed", failed, skipped)


class Orchestrator:
    """Builds a workflow from step specifications and runs it."""

    def __init__(self, logger: logging.Logger | None, *args: StepSpec | Step) -> None:
        base = logger if logger is not None else logging.getLogger(__name__)
        self._logger = base.getChild("orchestrator")
        self._steps: list[StepSpec | Step] = list(args)
        self._workflow: Workflow | None = None

    @property
    def workflow(self) -> Workflow | None:
        return self._workflow

    def build(self) -> None:
        """Assemble the workflow from the configured steps."""
        self._logger.getChild("build").debug("building orchestrator")
        workflow = Workflow()
        for spec in self._steps:
            workflow.add(spec)
        self._workflow = workflow

    def run(self) -> None:
        """Run the built workflow."""
        logger = self._logger.getChild("run")
        logger.debug("running orchestrator")
        if self._workflow is None:
            raise WorkflowNotBuiltError()
        try:
            self._workflow.run()
        except WorkflowError as exc:
            logger.error("running orchestrator error: %s", exc)
            raise