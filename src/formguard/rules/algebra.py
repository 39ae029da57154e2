"""Rule composition algebra.

A rule wraps a predicate over a field value and the whole record (``root``).
Synchronous rules return a ``Result`` directly; asynchronous rules return an
awaitable of one. Rules of the same variant compose with short-circuit AND
and OR:

    &  = and then (the right rule only runs if the left one passed)
    |  = or else (the right rule only runs if the left one failed)

A synchronous rule is lifted with ``to_async()`` before it can be combined
with an asynchronous one.

Example:
    not_blank = rule(lambda v, root: PASSED if v else failed("required"))
    short = rule(lambda v, root: PASSED if len(v or "") <= 8 else failed("max"))

    username = not_blank & short
    username.run("pat")  # PASSED

    checked = username.to_async() & async_rule(check_username_taken)
    await checked.run("pat")
"""

import asyncio
from dataclasses import dataclass
from functools import reduce
from typing import Any, Awaitable, Callable, Union

from formguard.errors import RuleCompositionError
from formguard.results import Result

SyncPredicate = Callable[[Any, Any], Result]
AsyncPredicate = Callable[[Any, Any], Awaitable[Result]]


@dataclass(frozen=True)
class SyncRule:
    """A rule whose predicate returns its result immediately."""

    predicate: SyncPredicate

    @property
    def is_async(self) -> bool:
        return False

    def run(self, value: Any, root: Any = None) -> Result:
        return self.predicate(value, root)

    def and_(self, other: "SyncRule") -> "SyncRule":
        return and_(self, other)

    def or_(self, other: "SyncRule") -> "SyncRule":
        return or_(self, other)

    def to_async(self) -> "AsyncRule":
        """Lift this rule for composition with asynchronous rules."""
        return to_async(self)

    def __and__(self, other: "SyncRule") -> "SyncRule":
        return and_(self, other)

    def __or__(self, other: "SyncRule") -> "SyncRule":
        return or_(self, other)


@dataclass(frozen=True)
class AsyncRule:
    """A rule whose predicate returns an awaitable result."""

    predicate: AsyncPredicate

    @property
    def is_async(self) -> bool:
        return True

    async def run(self, value: Any, root: Any = None) -> Result:
        return await self.predicate(value, root)

    def and_(self, other: "AsyncRule") -> "AsyncRule":
        return and_(self, other)

    def or_(self, other: "AsyncRule") -> "AsyncRule":
        return or_(self, other)

    def __and__(self, other: "AsyncRule") -> "AsyncRule":
        return and_(self, other)

    def __or__(self, other: "AsyncRule") -> "AsyncRule":
        return or_(self, other)


Rule = Union[SyncRule, AsyncRule]


def rule(predicate: SyncPredicate) -> SyncRule:
    """Wrap a ``(value, root) -> Result`` function. Usable as a decorator."""
    return SyncRule(predicate)


def async_rule(predicate: AsyncPredicate) -> AsyncRule:
    """Wrap an async ``(value, root) -> Result`` function. Usable as a decorator."""
    return AsyncRule(predicate)


def _check_same_variant(first: Any, second: Any) -> None:
    for operand in (first, second):
        if not isinstance(operand, (SyncRule, AsyncRule)):
            raise RuleCompositionError(
                f"Cannot compose {type(operand).__name__!r}: rules only compose with rules"
            )
    if first.is_async != second.is_async:
        raise RuleCompositionError(
            "Cannot compose a synchronous rule with an asynchronous one; "
            "lift the synchronous rule with to_async() first"
        )


def and_(first: Rule, second: Rule) -> Rule:
    """Compose two rules so the second only runs when the first passes.

    The first failure is returned as is.

    Raises:
        RuleCompositionError: If the operands are not the same variant
    """
    _check_same_variant(first, second)

    if isinstance(first, SyncRule):

        def run_both(value: Any, root: Any) -> Result:
            result = first.run(value, root)
            if not result.passed:
                return result
            return second.run(value, root)

        return SyncRule(run_both)

    async def run_both_async(value: Any, root: Any) -> Result:
        result = await first.run(value, root)
        if not result.passed:
            return result
        return await second.run(value, root)

    return AsyncRule(run_both_async)


def or_(first: Rule, second: Rule) -> Rule:
    """Compose two rules so the second only runs when the first fails.

    Raises:
        RuleCompositionError: If the operands are not the same variant
    """
    _check_same_variant(first, second)

    if isinstance(first, SyncRule):

        def run_either(value: Any, root: Any) -> Result:
            result = first.run(value, root)
            if result.passed:
                return result
            return second.run(value, root)

        return SyncRule(run_either)

    async def run_either_async(value: Any, root: Any) -> Result:
        result = await first.run(value, root)
        if result.passed:
            return result
        return await second.run(value, root)

    return AsyncRule(run_either_async)


def to_async(sync_rule: SyncRule) -> AsyncRule:
    """Lift a synchronous rule; its result is delivered on the next loop turn."""
    if not isinstance(sync_rule, SyncRule):
        raise RuleCompositionError("to_async() expects a synchronous rule")

    async def lifted(value: Any, root: Any) -> Result:
        await asyncio.sleep(0)
        return sync_rule.run(value, root)

    return AsyncRule(lifted)


def all_of(first: Rule, *rest: Rule) -> Rule:
    """AND together one or more rules of the same variant, left to right."""
    return reduce(and_, rest, first)
