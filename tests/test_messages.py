"""Tests for message catalogs: lookup, interpolation and YAML loading."""

from datetime import date, datetime
from pathlib import Path

import pytest

from formguard.config import Settings
from formguard.errors import CatalogError
from formguard.messages import (
    CatalogIssue,
    MessageCatalog,
    catalog_issues,
    load_catalog_document,
    missing_templates,
)


RESOURCES = {
    "en": {
        "translation": {
            "min": "{{field}} must be at least {{expected}} characters",
            "required": "{{ field }} is required",
            "one_of": "Pick one of: {{expected}}",
        },
        "checkout": {
            "required": "Needed to complete your order",
        },
    },
    "nl": {
        "translation": {
            "required": "{{field}} is verplicht",
        },
    },
}


@pytest.fixture
def catalog():
    return MessageCatalog(RESOURCES)


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "messages.yaml"
    path.write_text(text)
    return path


# =============================================================================
# Lookup
# =============================================================================


class TestLookup:
    def test_render(self, catalog):
        assert catalog.t("min", {"field": "name", "expected": 2}) == "name must be at least 2 characters"

    def test_placeholder_whitespace(self, catalog):
        assert catalog.t("required", {"field": "email"}) == "email is required"

    def test_missing_key_returns_key(self, catalog):
        assert catalog.t("max", {"field": "name"}) == "max"
        assert catalog.t("checkout:max") == "checkout:max"

    def test_missing_data_renders_empty(self, catalog):
        assert catalog.t("min") == " must be at least  characters"

    def test_exists(self, catalog):
        assert catalog.exists("min")
        assert catalog.exists("checkout:required")
        assert not catalog.exists("checkout:min")
        assert not catalog.exists("required__email")

    def test_namespace(self, catalog):
        assert catalog.t("checkout:required") == "Needed to complete your order"
        assert catalog.t("translation:required", {"field": "x"}) == "x is required"

    def test_locale_then_fallback(self):
        catalog = MessageCatalog(RESOURCES, locale="nl", fallback_locale="en")
        assert catalog.t("required", {"field": "naam"}) == "naam is verplicht"
        assert catalog.t("min", {"field": "naam", "expected": 2}) == "naam must be at least 2 characters"

    def test_unknown_locale_without_fallback(self):
        catalog = MessageCatalog(RESOURCES, locale="de", fallback_locale="de")
        assert catalog.t("required") == "required"

    def test_empty_catalog(self):
        catalog = MessageCatalog()
        assert catalog.t("is", {"field": "accept"}) == "is"
        assert not catalog.exists("is")

    def test_keys(self, catalog):
        assert catalog.keys() == {"min", "required", "one_of"}
        assert catalog.keys(namespace="checkout") == {"required"}
        assert catalog.keys("nl") == {"required"}
        assert catalog.keys("fr") == set()


# =============================================================================
# Interpolation
# =============================================================================


class TestInterpolation:
    def test_dates(self, catalog):
        rendered = catalog.interpolate("{{d}}", {"d": date(2024, 3, 5)})
        assert rendered == "March 05, 2024"

    def test_datetimes(self, catalog):
        rendered = catalog.interpolate("{{d}}", {"d": datetime(2024, 3, 5, 14, 30)})
        assert rendered == "March 05, 2024 02:30 PM"

    def test_lists(self, catalog):
        assert catalog.t("one_of", {"expected": ["red", "green"]}) == "Pick one of: red, green"

    def test_none_and_numbers(self, catalog):
        assert catalog.interpolate("[{{a}}] [{{b}}] [{{c}}]", {"a": None, "b": 0, "c": 2.5}) == "[] [0] [2.5]"

    def test_non_placeholders_untouched(self, catalog):
        assert catalog.interpolate("{field} {{ }}", {"field": "x"}) == "{field} {{ }}"


# =============================================================================
# YAML loading
# =============================================================================


class TestYamlLoading:
    def test_from_yaml(self, tmp_path):
        path = write(tmp_path, """
en:
  translation:
    required: "{{field}} is required"
    required__email: "Please enter your email address"
""")
        catalog = MessageCatalog.from_yaml(path)

        assert catalog.t("required", {"field": "name"}) == "name is required"
        assert catalog.exists("required__email")

    def test_bool_keys_stay_strings(self, tmp_path):
        path = write(tmp_path, """
en:
  translation:
    true: "{{field}} must be checked"
    false: "{{field}} must be unchecked"
""")
        catalog = MessageCatalog.from_yaml(path)

        assert catalog.t("true", {"field": "accept"}) == "accept must be checked"
        assert catalog.keys() == {"true", "false"}

    def test_invalid_structure(self, tmp_path):
        path = write(tmp_path, """
en:
  translation:
    min: 3
""")
        with pytest.raises(CatalogError, match="Invalid message catalog"):
            MessageCatalog.from_yaml(path)

    def test_yaml_syntax_error(self, tmp_path):
        path = write(tmp_path, "en: [unclosed\n")
        with pytest.raises(CatalogError, match="YAML parse error"):
            load_catalog_document(path)

    def test_empty_file(self, tmp_path):
        with pytest.raises(CatalogError, match="empty"):
            load_catalog_document(write(tmp_path, ""))

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="Cannot read"):
            load_catalog_document(tmp_path / "nope.yaml")

    def test_from_settings(self, tmp_path):
        path = write(tmp_path, """
nl:
  translation:
    required: "verplicht"
""")
        catalog = MessageCatalog.from_settings(Settings(locale="nl", messages_path=path))

        assert catalog.locale == "nl"
        assert catalog.t("required") == "verplicht"

    def test_from_settings_without_path(self):
        catalog = MessageCatalog.from_settings(Settings(locale="de", fallback_locale="en"))
        assert catalog.locale == "de"
        assert catalog.fallback_locale == "en"
        assert catalog.resources == {}


# =============================================================================
# Schema checks
# =============================================================================


class TestCatalogIssues:
    def test_valid_document(self):
        assert catalog_issues(RESOURCES) == []

    def test_non_string_template(self):
        issues = catalog_issues({"en": {"translation": {"min": 3}}})

        assert len(issues) == 1
        assert issues[0].path == "en/translation/min"
        assert "string" in issues[0].message

    def test_bad_key_names(self):
        issues = catalog_issues({"en": {"translation": {"checkout:min": "x"}}})
        assert len(issues) == 1

    def test_bad_locale(self):
        assert catalog_issues({"english language": {"translation": {}}})

    def test_empty_document(self):
        assert catalog_issues({})

    def test_issue_format(self):
        assert str(CatalogIssue("bad", "en/translation")) == "[ERROR] at en/translation: bad"
        assert str(CatalogIssue("bad")) == "[ERROR]: bad"


class TestMissingTemplates:
    def test_missing(self, catalog):
        assert missing_templates(catalog, ["required", "max", "email", "min"]) == ["email", "max"]

    def test_other_locale(self, catalog):
        assert missing_templates(catalog, ["required", "min"], locale="nl") == ["min"]

    def test_field_keys_do_not_count(self):
        catalog = MessageCatalog({"en": {"translation": {"required__email": "x"}}})
        assert missing_templates(catalog, ["required"]) == ["required"]
