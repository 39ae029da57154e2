"""Tests for the per-field validation state machine."""

import asyncio
import logging

import pytest

from formguard.results import GENERIC_RULE, PASSED, failed
from formguard.rules.algebra import async_rule, rule
from formguard.state import FieldKind, FieldState, Jobs, cleared


def min_two(value, root):
    return PASSED if len(value or "") >= 2 else failed("min", expected=2, given=value)


async def remote_check(value, root):
    await asyncio.sleep(0)
    return failed("taken") if value == "taken" else PASSED


@pytest.fixture
def sync_field():
    return FieldState(rule=rule(min_two))


@pytest.fixture
def async_field():
    return FieldState(rule=async_rule(remote_check))


# =============================================================================
# Synchronous Rules
# =============================================================================


class TestSyncValidate:
    def test_starts_unvalidated(self, sync_field):
        assert sync_field.kind is FieldKind.UNVALIDATED
        assert sync_field.result is None
        assert sync_field.jobs == Jobs()
        assert sync_field.passed() is False

    def test_zero_delay_validates_immediately(self, sync_field):
        state = sync_field.validate("ab")
        assert state.kind is FieldKind.VALIDATED
        assert state.result is PASSED
        assert state.passed() is True
        assert state.jobs.idle

    def test_failure_is_not_passed(self, sync_field):
        state = sync_field.validate("a")
        assert state.kind is FieldKind.VALIDATED
        assert state.result == failed("min", expected=2, given="a")
        assert state.passed() is False

    def test_returns_new_value(self, sync_field):
        state = sync_field.validate("ab")
        assert state is not sync_field
        assert sync_field.kind is FieldKind.UNVALIDATED

    def test_rule_is_kept(self, sync_field):
        assert sync_field.validate("ab").clear().rule is sync_field.rule

    def test_root_reaches_rule(self):
        field_state = FieldState(
            rule=rule(lambda v, root: PASSED if v == root["confirm"] else failed("equal_to"))
        )
        assert field_state.validate("x", {"confirm": "x"}).passed()
        assert not field_state.validate("x", {"confirm": "y"}).passed()

    def test_raising_predicate_becomes_generic_failure(self, caplog):
        def broken(value, root):
            raise RuntimeError("boom")

        with caplog.at_level(logging.WARNING, logger="formguard.state"):
            state = FieldState(rule=rule(broken)).validate("x")

        assert state.kind is FieldKind.VALIDATED
        assert state.result.name == GENERIC_RULE
        assert state.result.data["error"] == "boom"
        assert "boom" in caplog.text

    def test_delay_queues_job_for_sync_rule(self, sync_field):
        state = sync_field.validate("ab", delay=0.05)
        assert state.kind is FieldKind.VALIDATING
        assert state.jobs.next is not None
        assert state.jobs.current is None

    def test_immediate_run_supersedes_queued_job(self, sync_field):
        state = sync_field.validate("a", delay=0.05).validate("abcd")
        assert state.kind is FieldKind.VALIDATED
        assert state.passed() is True
        assert state.jobs.next is cleared

    @pytest.mark.asyncio
    async def test_delayed_sync_job_runs_rule_after_delay(self, sync_field):
        state = sync_field.validate("a", delay=0.01)
        assert await state.jobs.next() == failed("min", expected=2, given="a")


# =============================================================================
# Asynchronous Rules
# =============================================================================


class TestAsyncValidate:
    def test_queues_job_and_becomes_validating(self, async_field):
        state = async_field.validate("free")
        assert state.kind is FieldKind.VALIDATING
        assert state.result is None
        assert state.jobs.next is not None
        assert state.jobs.current is None

    @pytest.mark.asyncio
    async def test_queued_job_runs_rule(self, async_field):
        state = async_field.validate("taken")
        assert await state.jobs.next() == failed("taken")

    def test_newer_request_replaces_next(self, async_field):
        first = async_field.validate("one")
        second = first.validate("two")
        assert second.jobs.next is not first.jobs.next

    @pytest.mark.asyncio
    async def test_last_write_wins(self, async_field):
        state = async_field.validate("taken").validate("free")
        assert await state.jobs.next() is PASSED

    def test_validated_field_keeps_result_while_pending(self, async_field):
        validated = FieldState(rule=async_field.rule, kind=FieldKind.VALIDATED, result=PASSED)

        state = validated.validate("again")

        assert state.kind is FieldKind.VALIDATED
        assert state.result is PASSED
        assert state.jobs.next is not None

    def test_clear_when_validating_shows_validating(self, async_field):
        validated = FieldState(rule=async_field.rule, kind=FieldKind.VALIDATED, result=PASSED)

        state = validated.validate("again", clear_when_validating=True)

        assert state.kind is FieldKind.VALIDATING
        assert state.result is None

    def test_validate_never_touches_current(self, async_field):
        loop_future = object()
        running = FieldState(rule=async_field.rule, jobs=Jobs(current=loop_future))
        assert running.validate("x").jobs.current is loop_future
        assert running.clear().jobs.current is loop_future


# =============================================================================
# Clear
# =============================================================================


class TestClear:
    def test_clear_resets_to_unvalidated(self, sync_field):
        state = sync_field.validate("ab").clear()
        assert state.kind is FieldKind.UNVALIDATED
        assert state.result is None
        assert state.passed() is False

    def test_clear_queues_neutralizing_job(self, async_field):
        state = async_field.validate("x").clear()
        assert state.jobs.next is cleared

    @pytest.mark.asyncio
    async def test_neutralizing_job_resolves_passed(self):
        assert await cleared() is PASSED
