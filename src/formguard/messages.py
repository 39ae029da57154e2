"""
messages.py: message lookup for failed rules.

The validator resolves failure messages through a ``MessageLookup``: any
object with ``t(key, data)`` and ``exists(key)``. ``MessageCatalog`` is the
bundled implementation, loaded from YAML:

    en:
      translation:
        min: "{{field}} must be at least {{expected}} characters long"
        required__email: "Please enter your email address"
      checkout:
        required: "This is needed to complete your order"

Keys may carry a namespace prefix (``checkout:required``); unprefixed keys
use the default namespace. Lookups fall back to ``fallback_locale`` and, when
nothing matches, return the key itself.

PyYAML quirk: bare ``true:``/``false:`` keys (the boolean rule names) are
parsed as booleans. Loaded documents are preprocessed to turn them back into
strings before schema validation.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Protocol

import yaml
from jsonschema import Draft202012Validator

from formguard.errors import CatalogError

if TYPE_CHECKING:
    from formguard.config import Settings

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "catalog.schema.json"

DEFAULT_NAMESPACE = "translation"

# {{ name }} placeholders, i18next style
PLACEHOLDER = re.compile(r"\{\{\s*(?P<name>\w+)\s*\}\}")


class MessageLookup(Protocol):
    """Protocol for translating a failure into a display string."""

    def t(self, key: str, data: Mapping[str, Any] | None = None) -> str:
        """Render the template for ``key`` with ``data``."""
        ...

    def exists(self, key: str) -> bool:
        """Check whether a template exists for ``key``."""
        ...


@dataclass
class CatalogIssue:
    """A single problem found in a message catalog document."""

    message: str
    path: str = ""

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[ERROR]{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _stringify_bool_keys(obj: Any) -> Any:
    if isinstance(obj, dict):
        result: dict[Any, Any] = {}
        for k, v in obj.items():
            if k is True:
                k = "true"
            elif k is False:
                k = "false"
            result[k] = _stringify_bool_keys(v)
        return result
    return obj


def load_catalog_document(path: Path) -> dict[str, Any]:
    """Parse a YAML catalog file.

    Raises:
        CatalogError: If the file cannot be read or parsed, or is empty
    """
    try:
        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        raise CatalogError(f"Cannot read message catalog {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise CatalogError(f"YAML parse error in {path}: {exc}") from exc

    if raw is None:
        raise CatalogError(f"Message catalog {path} is empty")

    return _stringify_bool_keys(raw)


def catalog_issues(document: Any) -> list[CatalogIssue]:
    """Check a parsed catalog document against the catalog JSON Schema."""
    with _SCHEMA_PATH.open() as fh:
        schema = json.load(fh)

    validator = Draft202012Validator(schema)
    return [
        CatalogIssue(
            message=error.message,
            path="/".join(str(p) for p in error.absolute_path),
        )
        for error in sorted(validator.iter_errors(document), key=lambda e: list(map(str, e.path)))
    ]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class MessageCatalog:
    """In-memory message templates keyed by locale and namespace.

    Example:
        catalog = MessageCatalog({"en": {"translation": {"is": "{{field}} is wrong"}}})
        catalog.t("is", {"field": "accept"})  # "accept is wrong"
    """

    def __init__(
        self,
        resources: Mapping[str, Mapping[str, Mapping[str, str]]] | None = None,
        locale: str = "en",
        fallback_locale: str = "en",
        default_namespace: str = DEFAULT_NAMESPACE,
    ):
        self.resources = resources or {}
        self.locale = locale
        self.fallback_locale = fallback_locale
        self.default_namespace = default_namespace

    @classmethod
    def from_yaml(
        cls,
        path: Path,
        locale: str = "en",
        fallback_locale: str = "en",
    ) -> MessageCatalog:
        """Load and schema-check a YAML catalog.

        Raises:
            CatalogError: If the file is unreadable or does not match the schema
        """
        document = load_catalog_document(path)
        issues = catalog_issues(document)
        if issues:
            raise CatalogError(
                f"Invalid message catalog {path}: " + "; ".join(str(i) for i in issues)
            )

        logger.debug("Loaded message catalog %s (locales: %s)", path, ", ".join(document))
        return cls(document, locale=locale, fallback_locale=fallback_locale)

    @classmethod
    def from_settings(cls, settings: Settings) -> MessageCatalog:
        """Load the catalog configured in settings, or an empty one."""
        if settings.messages_path is None:
            return cls(locale=settings.locale, fallback_locale=settings.fallback_locale)
        return cls.from_yaml(
            settings.messages_path,
            locale=settings.locale,
            fallback_locale=settings.fallback_locale,
        )

    def exists(self, key: str) -> bool:
        return self._find(key) is not None

    def t(self, key: str, data: Mapping[str, Any] | None = None) -> str:
        template = self._find(key)
        if template is None:
            logger.debug("No message template for key '%s'", key)
            return key
        return self.interpolate(template, data or {})

    def keys(self, locale: str | None = None, namespace: str | None = None) -> set[str]:
        """Keys defined for a locale and namespace (defaults: the catalog's own)."""
        by_namespace = self.resources.get(locale or self.locale, {})
        return set(by_namespace.get(namespace or self.default_namespace, {}))

    def interpolate(self, template: str, data: Mapping[str, Any]) -> str:
        """Replace ``{{name}}`` placeholders; unknown names render empty."""

        def replace(match: re.Match) -> str:
            return _format_value(data.get(match.group("name")))

        return PLACEHOLDER.sub(replace, template)

    def _find(self, key: str) -> str | None:
        namespace, sep, name = key.partition(":")
        if not sep:
            namespace, name = self.default_namespace, key

        for locale in _unique((self.locale, self.fallback_locale)):
            templates = self.resources.get(locale, {}).get(namespace, {})
            if name in templates:
                return templates[name]
        return None


def missing_templates(
    catalog: MessageCatalog,
    names: Iterable[str],
    locale: str | None = None,
) -> list[str]:
    """Rule names with no unprefixed template in the default namespace."""
    defined = catalog.keys(locale)
    return sorted(set(names) - defined)


def _unique(items: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def _format_value(value: Any) -> str:
    """Format a data value for display."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%B %d, %Y %I:%M %p")
    if isinstance(value, date):
        return value.strftime("%B %d, %Y")
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)
