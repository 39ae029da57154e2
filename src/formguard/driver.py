"""Job driver: advances pending async validation jobs once per tick.

The render loop calls ``tick(state)`` every tick and applies the returned
patch to its newest state:

    state = driver.tick(state)(state)

Per field, a tick:
1. Resolves a settled ``jobs.current``. If no newer job is queued the result
   is folded into the field as ``validated``; otherwise it is discarded so the
   latest request always wins.
2. Promotes ``jobs.next`` into ``jobs.current`` when nothing is running,
   starting it as an asyncio task. Both steps run in the same tick, so a job
   queued behind a discarded result starts without waiting a tick.

A job that raises or is cancelled becomes a ``Failed`` result with the
generic rule name instead of propagating.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Callable

from formguard.config import Settings
from formguard.results import GENERIC_RULE, Failed, Passed, Result, failed
from formguard.state import FieldKind, FieldState, Jobs, cleared
from formguard.validator import ValidatorState

logger = logging.getLogger(__name__)

Patch = Callable[[ValidatorState], ValidatorState]


class JobDriver:
    """Promotes queued jobs and folds settled ones back into field states.

    The driver is the only writer of ``jobs.current``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cancel_superseded: bool | None = None,
    ):
        """Initialize the driver.

        Args:
            settings: Engine settings; read from the environment if omitted
            cancel_superseded: Cancel a running job as soon as a newer one is
                queued (overrides the setting)
        """
        self.settings = settings or Settings.from_env()
        self.cancel_superseded = (
            self.settings.cancel_superseded if cancel_superseded is None else cancel_superseded
        )

    def tick(self, state: ValidatorState) -> Patch:
        """Build the patch advancing every field of ``state`` that has jobs.

        The patch re-reads each field from the state it is applied to, so it
        stays correct if the caller validated in between.
        """
        pending = [name for name, field_state in state.fields.items() if not field_state.jobs.idle]

        def patch(latest: ValidatorState) -> ValidatorState:
            updates: dict[str, FieldState] = {}
            for name in pending:
                field_state = latest.fields.get(name)
                if field_state is None:
                    continue
                stepped = self.promote(self.resolve(field_state, name), name)
                if stepped is not field_state:
                    updates[name] = stepped
            return latest.with_fields(updates)

        return patch

    def resolve(self, field_state: FieldState, name: str = "") -> FieldState:
        """Fold a settled current job into the field, or discard its result."""
        current = field_state.jobs.current
        if current is None:
            return field_state

        if not current.done():
            if self.cancel_superseded and field_state.jobs.next is not None:
                logger.debug("Cancelling superseded job for field '%s'", name)
                current.cancel()
            return field_state

        jobs = replace(field_state.jobs, current=None)
        if field_state.jobs.next is not None:
            logger.debug("Discarding superseded result for field '%s'", name)
            if not current.cancelled():
                # Retrieve the exception so asyncio does not report it as unhandled
                current.exception()
            return replace(field_state, jobs=jobs)

        return replace(
            field_state,
            kind=FieldKind.VALIDATED,
            result=self._outcome(current, name),
            jobs=jobs,
        )

    def promote(self, field_state: FieldState, name: str = "") -> FieldState:
        """Start the queued job when nothing is running."""
        jobs = field_state.jobs
        if jobs.next is None or jobs.current is not None:
            return field_state

        if jobs.next is cleared:
            # Sentinel only supersedes; the field keeps its kind and result
            return replace(field_state, jobs=Jobs())

        logger.debug("Starting validation job for field '%s'", name)
        task = asyncio.ensure_future(jobs.next())
        return replace(field_state, jobs=Jobs(current=task, next=None))

    async def settle(
        self,
        state: ValidatorState,
        timeout: float | None = None,
    ) -> ValidatorState:
        """Tick until no field holds a job and return the final state.

        Raises:
            asyncio.TimeoutError: If jobs are still pending after ``timeout`` seconds
        """
        return await asyncio.wait_for(self._drain(state), timeout)

    async def _drain(self, state: ValidatorState) -> ValidatorState:
        while _has_jobs(state):
            state = self.tick(state)(state)
            if _has_jobs(state):
                await asyncio.sleep(self.settings.tick_interval)
        return state

    def _outcome(self, task: "asyncio.Future[Result]", name: str) -> Result:
        if task.cancelled():
            logger.warning("Validation job for field '%s' was cancelled", name)
            return failed(GENERIC_RULE, error="cancelled")

        exc = task.exception()
        if exc is not None:
            logger.warning("Validation job for field '%s' failed: %s", name, exc)
            return failed(GENERIC_RULE, error=str(exc))

        result = task.result()
        if not isinstance(result, (Passed, Failed)):
            logger.warning(
                "Validation job for field '%s' returned %s, expected a Result",
                name,
                type(result).__name__,
            )
            return failed(GENERIC_RULE, error=f"invalid result {result!r}")
        return result


def _has_jobs(state: ValidatorState) -> bool:
    return any(not field_state.jobs.idle for field_state in state.fields.values())
