"""Per-field validation state machine.

A field moves through three kinds:

    unvalidated -> validating -> validated
    validated   -> unvalidated     (only via clear())

Synchronous rules validated without delay go straight to ``validated``.
Everything else is queued as a job in ``jobs.next``; the job driver promotes
it into ``jobs.current`` and folds the settled result back into the field.
Queuing always replaces the previous ``next``, so only the latest request
ever starts.

Field states are immutable; every transition returns a new value.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable

from formguard.results import GENERIC_RULE, PASSED, Result, failed
from formguard.rules.algebra import Rule

logger = logging.getLogger(__name__)

JobFactory = Callable[[], Awaitable[Result]]


class FieldKind(str, Enum):
    """Validation progress of a single field."""

    UNVALIDATED = "unvalidated"
    VALIDATING = "validating"
    VALIDATED = "validated"


@dataclass(frozen=True)
class Jobs:
    """Async work slots of a field.

    Attributes:
        current: The job in flight; written only by the job driver
        next: The latest requested job, not yet started; written only by
            validate() and clear()
    """

    current: "asyncio.Future[Result] | None" = None
    next: JobFactory | None = None

    @property
    def idle(self) -> bool:
        return self.current is None and self.next is None


async def cleared() -> Result:
    """Job queued to supersede older work without doing any of its own.

    clear() queues it, and so does an immediate synchronous validation while
    a job is queued or running. The driver retires it without starting it, so
    the field keeps the kind and result those calls set.
    """
    return PASSED


async def _run(rule: Rule, value: Any, root: Any) -> Result:
    if rule.is_async:
        return await rule.run(value, root)
    return rule.run(value, root)


@dataclass(frozen=True)
class FieldState:
    """Validation state of one field.

    Attributes:
        rule: The field's rule; fixed for the lifetime of the field
        jobs: Running and queued async jobs
        kind: Validation progress
        result: The latest result; set only when kind is VALIDATED
    """

    rule: Rule
    jobs: Jobs = field(default_factory=Jobs)
    kind: FieldKind = FieldKind.UNVALIDATED
    result: Result | None = None

    def passed(self) -> bool:
        """Has this field been validated with a passing result?"""
        return (
            self.kind is FieldKind.VALIDATED
            and self.result is not None
            and self.result.passed
        )

    def validate(
        self,
        value: Any,
        root: Any = None,
        delay: float = 0,
        clear_when_validating: bool = False,
    ) -> "FieldState":
        """Run or queue the field's rule for a value.

        Args:
            value: The field value
            root: The whole record, for rules that read other fields
            delay: Seconds to wait before running; a newer request made
                before the job starts replaces it (debounce)
            clear_when_validating: Show the field as validating while the job
                is pending, even if it already holds a result

        A synchronous rule with no delay runs now and supersedes any job
        already queued or running for the field.

        Returns:
            The new field state
        """
        if delay <= 0 and not self.rule.is_async:
            jobs = self.jobs
            if not jobs.idle:
                # An older queued or running job must not overwrite this result
                jobs = replace(jobs, next=cleared)
            return replace(
                self,
                kind=FieldKind.VALIDATED,
                result=self._run_now(value, root),
                jobs=jobs,
            )

        if clear_when_validating or self.kind is FieldKind.UNVALIDATED:
            kind = FieldKind.VALIDATING
        else:
            kind = self.kind

        return replace(
            self,
            kind=kind,
            result=self.result if kind is FieldKind.VALIDATED else None,
            jobs=replace(self.jobs, next=self._job(value, root, delay)),
        )

    def clear(self) -> "FieldState":
        """Drop the result and supersede any queued or running job."""
        return replace(
            self,
            kind=FieldKind.UNVALIDATED,
            result=None,
            jobs=replace(self.jobs, next=cleared),
        )

    def _run_now(self, value: Any, root: Any) -> Result:
        try:
            return self.rule.run(value, root)
        except Exception as exc:
            logger.warning("Rule predicate raised for value %r: %s", value, exc)
            return failed(GENERIC_RULE, error=str(exc))

    def _job(self, value: Any, root: Any, delay: float) -> JobFactory:
        rule = self.rule

        if delay > 0:

            async def delayed() -> Result:
                await asyncio.sleep(delay)
                return await _run(rule, value, root)

            return delayed

        async def immediate() -> Result:
            return await _run(rule, value, root)

        return immediate
