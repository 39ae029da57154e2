"""Validator aggregate: whole-record validation over per-field states.

Usage:
    state = validator_state({
        "accept": (bool, lambda b: b.true),
        "name": (str, lambda b: b.min(2) & b.alpha_numeric),
        "email": (str, lambda b: b.email.to_async() & b.from_async(check_taken)),
    })

    state = state.validate(record)                   # every field
    state = state.validate(record, "name", 0.35)     # one field, debounced

    state.error("name")    # True until "name" has passed
    state.message("name")  # rendered failure message, or None
    state.kind()           # ValidatorKind.VALIDATING while jobs are pending

The aggregate is immutable; ``validate`` and ``clear`` return new snapshots.
Pending async jobs are advanced by ``formguard.driver.JobDriver``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

from formguard.config import Settings
from formguard.errors import SchemaError
from formguard.messages import MessageCatalog, MessageLookup
from formguard.rules.algebra import AsyncRule, Rule, SyncRule
from formguard.rules.builders import RuleBuilder, builder_for
from formguard.state import FieldKind, FieldState


class ValidatorKind(str, Enum):
    """Status of a validator, folded over its fields."""

    UNVALIDATED = "unvalidated"
    VALIDATING = "validating"
    VALIDATED = "validated"


@dataclass(frozen=True)
class TranslationOptions:
    """Options for rendering a failure message.

    Attributes:
        ns: Namespace prefixed to every key as ``ns:key``
        key: Explicit key overriding the rule-based keys
        data: Extra render data, merged last
    """

    ns: str | None = None
    key: str | None = None
    data: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class FieldSchema:
    """Schema entry for a field.

    Attributes:
        type: Declared value type (FieldType, its name, or a Python type)
        build: Builds the field's rule from the type's rule builder
    """

    type: Any
    build: Callable[[RuleBuilder], Rule]

    def create_rule(self, name: str) -> Rule:
        """Build the rule for field ``name``.

        Raises:
            UnknownFieldTypeError: If the declared type has no builder
            SchemaError: If the build function does not return a rule
        """
        rule = self.build(builder_for(self.type))
        if not isinstance(rule, (SyncRule, AsyncRule)):
            raise SchemaError(
                f"Rule builder for field '{name}' returned {type(rule).__name__}, expected a rule"
            )
        return rule


Schema = Mapping[str, Union[FieldSchema, tuple]]


def _project(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class ValidatorState:
    """Validation state of a record: one FieldState per schema field.

    Attributes:
        fields: Read-only mapping of field name to its state
        messages: Lookup used to render failure messages
    """

    fields: Mapping[str, FieldState]
    messages: MessageLookup = field(default_factory=MessageCatalog)

    def validate(
        self,
        record: Any,
        field: str | None = None,
        delay: float = 0,
        clear_when_validating: bool = False,
    ) -> "ValidatorState":
        """Validate one field, or every field, against a record.

        Args:
            record: The whole record; rules receive their field's value and
                the record itself
            field: Only validate this field; others are left untouched
            delay: Seconds to wait before running (debounced)
            clear_when_validating: Show fields as validating while pending

        Returns:
            A new snapshot. An unknown field returns this snapshot unchanged.
        """
        names = self._targets(field)
        return self.with_fields({
            name: self.fields[name].validate(
                _project(record, name), record, delay, clear_when_validating
            )
            for name in names
        })

    def clear(self, field: str | None = None) -> "ValidatorState":
        """Clear one field, or every field. An unknown field is a no-op."""
        return self.with_fields({name: self.fields[name].clear() for name in self._targets(field)})

    def passed(self, field: str | None = None) -> bool:
        """Has the field (or every field) been validated with a passing result?"""
        if field is not None:
            state = self.fields.get(field)
            return state is not None and state.passed()
        return all(state.passed() for state in self.fields.values())

    def error(self, field: str | None = None) -> bool:
        """Is the field (or any field) not passing?

        Unvalidated and validating fields count as errors. A field with no
        rule never errors.
        """
        if field is not None:
            state = self.fields.get(field)
            return state is not None and not state.passed()
        return any(not state.passed() for state in self.fields.values())

    def kind(self) -> ValidatorKind:
        """Validating if any field is; else unvalidated unless all are validated."""
        kinds = [state.kind for state in self.fields.values()]
        if FieldKind.VALIDATING in kinds:
            return ValidatorKind.VALIDATING
        if any(k is not FieldKind.VALIDATED for k in kinds):
            return ValidatorKind.UNVALIDATED
        return ValidatorKind.VALIDATED

    def message(
        self,
        field: str,
        options: TranslationOptions | None = None,
    ) -> str | None:
        """Render the failure message for a field.

        Keys tried, in order: ``options.key``; ``{rule}__{field}`` if the
        lookup has it; ``{rule}``. Render data is the failure's data plus
        ``field``, ``rule_name``, ``kind`` and ``options.data``.

        Returns:
            The message, or None unless the field is validated and failing
        """
        state = self.fields.get(field)
        if state is None or state.kind is not FieldKind.VALIDATED:
            return None
        result = state.result
        if result is None or result.passed:
            return None

        options = options or TranslationOptions()
        prefix = f"{options.ns}:" if options.ns else ""
        data = {
            **result.data,
            "field": field,
            "rule_name": result.name,
            "kind": result.name,
            **(options.data or {}),
        }

        if options.key:
            return self.messages.t(f"{prefix}{options.key}", data)

        field_key = f"{prefix}{result.name}__{field}"
        if self.messages.exists(field_key):
            return self.messages.t(field_key, data)
        return self.messages.t(f"{prefix}{result.name}", data)

    def with_fields(self, updates: Mapping[str, FieldState]) -> "ValidatorState":
        """Copy this snapshot with some field states replaced."""
        if not updates:
            return self
        return replace(self, fields=MappingProxyType({**self.fields, **updates}))

    def _targets(self, field: str | None) -> list[str]:
        if field is None:
            return list(self.fields)
        if field in self.fields:
            return [field]
        return []


def validator_state(
    schema: Schema,
    messages: MessageLookup | None = None,
    settings: Settings | None = None,
) -> ValidatorState:
    """Build the initial validator state from a schema.

    Args:
        schema: Field name to ``FieldSchema`` or ``(type, build)`` tuple.
            Fields not in the schema are not validated at all.
        messages: Message lookup. Defaults to the catalog configured in
            ``settings``; with no catalog configured, every message renders
            as its key
        settings: Settings used to load the default catalog; read from the
            environment if omitted

    Raises:
        SchemaError: If an entry is malformed or builds something other than a rule
        UnknownFieldTypeError: If an entry declares an unsupported type
        CatalogError: If the configured message catalog cannot be loaded
    """
    fields: dict[str, FieldState] = {}

    for name, entry in schema.items():
        if isinstance(entry, tuple):
            if len(entry) != 2:
                raise SchemaError(
                    f"Schema entry for field '{name}' must be (type, build), got {len(entry)} items"
                )
            entry = FieldSchema(*entry)
        elif not isinstance(entry, FieldSchema):
            raise SchemaError(
                f"Schema entry for field '{name}' must be a FieldSchema or (type, build) tuple"
            )
        fields[name] = FieldState(rule=entry.create_rule(name))

    if messages is None:
        messages = MessageCatalog.from_settings(settings or Settings.from_env())

    return ValidatorState(fields=MappingProxyType(fields), messages=messages)
