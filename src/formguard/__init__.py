"""formguard: declarative, incremental validation for record data.

This package provides:
- Results: Passed / Failed values carrying message render data
- Rules: sync and async predicates composed with short-circuit AND / OR
- Builders: a typed catalog of primitive rules (string, number, date, boolean)
- State: per-field validation state with debounced async jobs
- Validator: the whole-record aggregate and its query surface
- Driver: the per-tick job promotion that advances async validation

Usage:
    from formguard import JobDriver, validator_state

    state = validator_state({
        "name": (str, lambda b: b.min(2) & b.alpha_numeric),
        "accept": (bool, lambda b: b.is_(True)),
    })
    driver = JobDriver()

    state = state.validate({"name": "a1!", "accept": False})
    state = await driver.settle(state)
    state.error("name")    # True
    state.message("name")  # "alpha_numeric" unless a catalog provides a template
"""

from formguard.config import Settings
from formguard.driver import JobDriver, Patch
from formguard.errors import (
    CatalogError,
    FormguardError,
    RuleCompositionError,
    SchemaError,
    UnknownFieldTypeError,
)
from formguard.messages import MessageCatalog, MessageLookup
from formguard.results import GENERIC_RULE, PASSED, Failed, Passed, Result, failed
from formguard.rules import (
    AsyncRule,
    FieldType,
    Rule,
    SyncRule,
    all_of,
    and_,
    async_rule,
    builder_for,
    or_,
    rule,
    to_async,
)
from formguard.state import FieldKind, FieldState, Jobs
from formguard.validator import (
    FieldSchema,
    TranslationOptions,
    ValidatorKind,
    ValidatorState,
    validator_state,
)

__all__ = [
    # Results
    "GENERIC_RULE",
    "PASSED",
    "Failed",
    "Passed",
    "Result",
    "failed",
    # Rules
    "AsyncRule",
    "FieldType",
    "Rule",
    "SyncRule",
    "all_of",
    "and_",
    "async_rule",
    "builder_for",
    "or_",
    "rule",
    "to_async",
    # State
    "FieldKind",
    "FieldState",
    "Jobs",
    # Validator
    "FieldSchema",
    "TranslationOptions",
    "ValidatorKind",
    "ValidatorState",
    "validator_state",
    # Driver
    "JobDriver",
    "Patch",
    # Messages
    "MessageCatalog",
    "MessageLookup",
    # Config
    "Settings",
    # Errors
    "CatalogError",
    "FormguardError",
    "RuleCompositionError",
    "SchemaError",
    "UnknownFieldTypeError",
]
