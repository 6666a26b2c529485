from __future__ import annotations

from typing import Any, Dict

import pytest

from fullnode_installer.errors import ConfigError
from fullnode_installer.pipeline import run_pipeline
from fullnode_installer.state_store import ensure_defaults, is_step_completed


class RecordingStep:
    def __init__(self, step_id: str, log: list, fail: bool = False) -> None:
        self.step_id = step_id
        self.title = f"step {step_id}"
        self._log = log
        self._fail = fail

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        self._log.append(self.step_id)
        if self._fail:
            raise RuntimeError(f"{self.step_id} failed")
        return state


def _steps(log, fail_on=None):
    return [RecordingStep(i, log, fail=(i == fail_on)) for i in ("10_a", "20_b", "30_c")]


def test_runs_all_steps_in_order():
    log: list = []
    state = ensure_defaults({})
    result = run_pipeline(state=state, steps=_steps(log))

    assert log == ["10_a", "20_b", "30_c"]
    assert result.ran_steps == log
    assert result.skipped_steps == []
    assert state["execution"]["current_step"] is None


def test_resume_skips_completed_steps():
    log: list = []
    state = ensure_defaults({})
    with pytest.raises(RuntimeError):
        run_pipeline(state=state, steps=_steps(log, fail_on="20_b"))

    assert is_step_completed(state, "10_a")
    assert not is_step_completed(state, "20_b")
    assert state["execution"]["current_step"] == "20_b"

    log.clear()
    result = run_pipeline(state=state, steps=_steps(log))
    assert log == ["20_b", "30_c"]
    assert result.skipped_steps == ["10_a"]


def test_force_reruns_completed_steps():
    log: list = []
    state = ensure_defaults({})
    run_pipeline(state=state, steps=_steps(log))
    log.clear()

    run_pipeline(state=state, steps=_steps(log), force=True)
    assert log == ["10_a", "20_b", "30_c"]
    assert state["execution"]["completed_steps"] == ["10_a", "20_b", "30_c"]


def test_start_at_and_stop_after():
    log: list = []
    result = run_pipeline(state=ensure_defaults({}), steps=_steps(log), start_at="20_b", stop_after="20_b")
    assert log == ["20_b"]
    assert result.ran_steps == ["20_b"]


def test_unknown_step_id_is_rejected_before_running():
    log: list = []
    with pytest.raises(ConfigError, match="99_nope"):
        run_pipeline(state=ensure_defaults({}), steps=_steps(log), stop_after="99_nope")
    assert log == []
