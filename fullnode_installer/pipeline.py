from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .errors import ConfigError
from .state_store import is_step_completed, mark_step_completed

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent provisioning step."""

    step_id: str
    title: str

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)


def _check_step_ids(steps: Sequence[Step], *names: Optional[str]) -> None:
    known = {s.step_id for s in steps}
    for n in names:
        if n is not None and n not in known:
            raise ConfigError(f"Unknown step id {n!r} (known: {', '.join(s.step_id for s in steps)})")


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    record: bool = True,
) -> PipelineResult:
    """Run steps in order with resume/idempotency semantics.

    A step is marked completed only after it returns; a failing step
    propagates its exception and stays pending for the next run. With
    record=False (dry runs) nothing is marked completed.
    """

    _check_step_ids(steps, start_at, stop_after)

    ran: List[str] = []
    skipped: List[str] = []
    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id != start_at:
                continue
            started = True

        state.setdefault("execution", {})["current_step"] = step.step_id

        if (not force) and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
        else:
            logger.info("Running step %s: %s", step.step_id, step.title)
            t0 = time.monotonic()
            state = step.run(state)
            if record:
                mark_step_completed(state, step.step_id)
            ran.append(step.step_id)
            logger.info("Step %s done in %.1fs", step.step_id, time.monotonic() - t0)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
