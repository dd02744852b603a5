import logging
import threading

import pytest

from gadflow.orchestrator import (
    Orchestrator,
    Step,
    StepSpec,
    Workflow,
    WorkflowError,
    WorkflowNotBuiltError,
    step,
)


class Recorder(Step):
    def __init__(self, name, log, fail=None):
        self.name = name
        self._log = log
        self._fail = fail

    def do(self):
        if self._fail is not None:
            raise self._fail
        with _lock:
            self._log.append(self.name)


_lock = threading.Lock()


@pytest.fixture
def log():
    return []


def test_step_wraps_into_spec(log):
    a = Recorder("a", log)
    spec = step(a)
    assert isinstance(spec, StepSpec)
    assert spec.step is a
    assert spec.upstreams == []


def test_depends_on_chains_and_deduplicates(log):
    a, b = Recorder("a", log), Recorder("b", log)
    spec = step(b)
    assert spec.depends_on(a) is spec
    spec.depends_on(a, step(a))
    assert spec.upstreams == [a]


def test_all_steps_run_once(log):
    steps = [Recorder(n, log) for n in ("a", "b", "c")]
    wf = Workflow()
    for s in steps:
        assert wf.add(step(s)) is wf
    wf.run()
    assert set(wf.steps) == set(steps)
    assert sorted(log) == ["a", "b", "c"]


def test_dependency_order(log):
    a, b = Recorder("a", log), Recorder("b", log)
    wf = Workflow().add(step(b).depends_on(a))
    wf.run()
    assert wf.upstreams_of(b) == [a]
    assert log.index("a") < log.index("b")


def test_upstream_is_added_automatically(log):
    a, b = Recorder("a", log), Recorder("b", log)
    wf = Workflow().add(step(b).depends_on(a))
    assert set(wf.steps) == {a, b}
    assert wf.upstreams_of(b) == [a]


def test_diamond_order(log):
    a, b, c, d = (Recorder(n, log) for n in "abcd")
    wf = Workflow()
    wf.add(step(b).depends_on(a))
    wf.add(step(c).depends_on(a))
    wf.add(step(d).depends_on(b, c))
    wf.run()
    assert set(wf.steps) == {a, b, c, d}
    assert set(wf.upstreams_of(d)) == {b, c}
    assert log[0] == "a"
    assert log[-1] == "d"
    assert len(log) == 4


def test_failure_skips_dependents_but_runs_others(log):
    boom = RuntimeError("boom")
    bad = Recorder("bad", log, fail=boom)
    after = Recorder("after", log)
    other = Recorder("other", log)
    wf = Workflow()
    wf.add(step(after).depends_on(bad))
    wf.add(step(other))
    with pytest.raises(WorkflowError) as info:
        wf.run()
    assert info.value.errors == {bad: boom}
    assert info.value.skipped == [after]
    assert log == ["other"]


def test_cycle_is_rejected(log):
    a, b = Recorder("a", log), Recorder("b", log)
    wf = Workflow()
    wf.add(step(a).depends_on(b))
    wf.add(step(b).depends_on(a))
    with pytest.raises(WorkflowError, match="cycle"):
        wf.run()
    assert log == []


def test_empty_workflow_runs(log):
    wf = Workflow()
    wf.run()
    assert wf.steps == []


def test_orchestrator_requires_build(log):
    o = Orchestrator(logging.getLogger("test"), step(Recorder("a", log)))
    with pytest.raises(WorkflowNotBuiltError, match="workflow not built"):
        o.run()
    assert log == []


def test_orchestrator_runs_built_workflow(log):
    a, b = Recorder("a", log), Recorder("b", log)
    spec_b = step(b).depends_on(a)
    o = Orchestrator(logging.getLogger("test"), step(a), spec_b)
    o.build()
    o.run()
    assert spec_b.upstreams == [a]
    assert log == ["a", "b"]


def test_orchestrator_accepts_bare_steps(log):
    o = Orchestrator(logging.getLogger("test"), Recorder("a", log))
    o.build()
    o.run()
    assert log == ["a"]


def test_orchestrator_logs_and_reraises(log, caplog):
    bad = Recorder("bad", log, fail=ValueError("nope"))
    o = Orchestrator(logging.getLogger("test"), step(bad))
    o.build()
    with caplog.at_level(logging.ERROR):
        with pytest.raises(WorkflowError) as info:
            o.run()
    assert bad in info.value.errors
    assert any("running orchestrator error" in r.getMessage() for r in caplog.records)