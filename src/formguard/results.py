"""Result values produced by running a rule.

A rule either passes or fails. A failure carries the name of the rule that
failed and a data bag with enough context to render a message for it.
"""

from dataclasses import dataclass, field
from typing import Any, Union

# Rule name used when a predicate raises or its job is cancelled
GENERIC_RULE = "generic"


@dataclass(frozen=True)
class Passed:
    """The rule accepted the value."""

    @property
    def passed(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    """The rule rejected the value.

    Attributes:
        name: Name of the rule that failed, also the message lookup key
        data: Render data for the message; always holds ``name``
    """

    name: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return False


Result = Union[Passed, Failed]

PASSED = Passed()


def failed(name: str, **data: Any) -> Failed:
    """Build a failure, storing the rule name in the data bag."""
    return Failed(name=name, data={**data, "name": name})
