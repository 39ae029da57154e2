"""Rules: the composition algebra and the typed builder catalog."""

from formguard.rules.algebra import (
    AsyncRule,
    Rule,
    SyncRule,
    all_of,
    and_,
    async_rule,
    or_,
    rule,
    to_async,
)
from formguard.rules.builders import (
    BoolRuleBuilder,
    DateRuleBuilder,
    FieldType,
    NumberRuleBuilder,
    RuleBuilder,
    StringRuleBuilder,
    builder_for,
    list_rule_names,
    resolve_field_type,
)

__all__ = [
    # Algebra
    "AsyncRule",
    "Rule",
    "SyncRule",
    "all_of",
    "and_",
    "async_rule",
    "or_",
    "rule",
    "to_async",
    # Builders
    "BoolRuleBuilder",
    "DateRuleBuilder",
    "FieldType",
    "NumberRuleBuilder",
    "RuleBuilder",
    "StringRuleBuilder",
    "builder_for",
    "list_rule_names",
    "resolve_field_type",
]
