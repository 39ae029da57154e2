"""Exceptions raised while building validators and loading message catalogs.

Validation outcomes are never exceptions: a failing rule yields a ``Failed``
result and the query surface of a validator never raises. The errors here
only cover misuse detected at construction time.
"""


class FormguardError(Exception):
    """Base class for formguard errors."""
    pass


class RuleCompositionError(FormguardError, TypeError):
    """A synchronous rule was composed with an asynchronous one.

    Lift the synchronous operand with ``to_async()`` first.
    """
    pass


class UnknownFieldTypeError(FormguardError, ValueError):
    """No rule builder exists for the declared field type."""
    pass


class SchemaError(FormguardError, ValueError):
    """A schema entry is malformed or its builder did not return a rule."""
    pass


class CatalogError(FormguardError, ValueError):
    """A message catalog could not be read or does not match its schema."""
    pass
