"""formguard CLI entry point."""

from pathlib import Path

import click

from formguard.errors import CatalogError
from formguard.messages import MessageCatalog, catalog_issues, load_catalog_document, missing_templates
from formguard.rules.builders import FieldType, list_rule_names


@click.group()
def cli():
    """formguard: declarative record validation."""
    pass


@cli.command()
@click.option(
    "--type",
    "field_type",
    type=click.Choice([t.value for t in FieldType]),
    default=None,
    help="Only list rules for this field type.",
)
def rules(field_type: str | None):
    """List the builtin rule names per field type."""
    types = [FieldType(field_type)] if field_type else list(FieldType)
    for t in types:
        click.echo(click.style(f"{t.value}:", bold=True))
        for name in list_rule_names(t):
            click.echo(f"  {name}")


@cli.group()
def messages():
    """Message catalog commands."""
    pass


@messages.command("check")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--locale", default="en", show_default=True, help="Locale to check coverage for.")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail when builtin rules have no message template.",
)
def check(path: Path, locale: str, strict: bool):
    """Validate a YAML message catalog and report uncovered builtin rules."""
    try:
        document = load_catalog_document(path)
    except CatalogError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        raise SystemExit(1)

    issues = catalog_issues(document)
    for issue in issues:
        click.echo(click.style(f"{path} {issue}", fg="red"))
    if issues:
        click.echo(click.style(f"\n{len(issues)} schema error(s) found", fg="red", bold=True))
        raise SystemExit(1)

    catalog = MessageCatalog(document, locale=locale, fallback_locale=locale)
    if locale not in document:
        click.echo(click.style(f"Warning: catalog has no '{locale}' locale", fg="yellow"))

    all_names = sorted({name for t in FieldType for name in list_rule_names(t)})
    missing = missing_templates(catalog, all_names)
    for name in missing:
        click.echo(click.style(f"  missing template: {name}", fg="yellow"))

    if missing:
        click.echo(
            click.style(
                f"{len(missing)} of {len(all_names)} builtin rule(s) have no '{locale}' template.",
                fg="yellow",
            )
        )
        if strict:
            raise SystemExit(1)

    click.echo(click.style("\nMessage catalog is valid.", fg="green", bold=True))
