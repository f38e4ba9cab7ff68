# src/formflow/cli.py
"""formflow Command Line Interface.

Entry point for the formflow CLI tool: validate form definitions and
render templates against sample values.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError

from formflow import __version__
from formflow.contracts.enums import TokenFormat
from formflow.contracts.errors import FormflowError
from formflow.contracts.request import RequestContext, Submission
from formflow.core.config import FormflowSettings, FormSettings, load_form_settings, load_settings
from formflow.core.elements import Container, Element, Field, Group, Html, Page
from formflow.core.form import Form
from formflow.tokens.engine import TokenEngine

__all__ = ["app"]

app = typer.Typer(
    name="formflow",
    help="formflow: form submission pipeline and template tokens.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"formflow version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to installation settings YAML (site, email defaults, storage).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """formflow: form submission pipeline and template tokens."""
    from formflow.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    ctx.obj = settings


def _fail(title: str, message: str, details: list[str] | None = None) -> None:
    typer.secho(f"{title}: {message}", fg=typer.colors.RED, err=True)
    for detail in details or []:
        typer.echo(f"  - {detail}", err=True)


def _load_installation(settings_path: Path | None) -> FormflowSettings:
    if settings_path is None:
        return FormflowSettings()
    try:
        return load_settings(settings_path.expanduser())
    except FileNotFoundError:
        _fail("File Not Found", f"Settings file does not exist: {settings_path}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        _fail("Configuration Validation Failed", f"Invalid settings in {settings_path.name}", _error_details(e))
        raise typer.Exit(1) from None


def _load_form(form_path: Path) -> Form:
    """Load, validate and build a form, exiting with a readable message on failure."""
    try:
        form_settings: FormSettings = load_form_settings(form_path.expanduser())
        return Form(form_settings)
    except yaml.YAMLError as e:
        _fail("YAML Syntax Error", f"Failed to parse {form_path.name}", [str(e)])
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _fail("File Not Found", f"Form definition does not exist: {form_path}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        # Must come before ValueError - ValidationError inherits from it
        _fail("Form Validation Failed", f"Invalid form definition in {form_path.name}", _error_details(e))
        raise typer.Exit(1) from None
    except (FormflowError, ValueError) as e:
        _fail("Form Error", str(e))
        raise typer.Exit(1) from None


def _error_details(error: ValidationError) -> list[str]:
    details = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"])
        details.append(f"{loc}: {item['msg']}" if loc else str(item["msg"]))
    return details


def _describe(element: Element, depth: int) -> str:
    indent = "  " * depth
    match element:
        case Page():
            return f"{indent}Page {element.id}: {element.label or '(untitled)'}"
        case Group():
            return f"{indent}Group {element.id}: {element.label or '(untitled)'}"
        case Field():
            required = " *" if element.required else ""
            return f"{indent}Field {element.id} [{element.kind}]: {element.get_admin_label()}{required}"
        case Html():
            return f"{indent}Html {element.id}"


def _walk(container: Container, depth: int) -> list[str]:
    lines: list[str] = []
    for child in container.children:
        lines.append(_describe(child, depth))
        if isinstance(child, Container):
            lines.extend(_walk(child, depth + 1))
    return lines


@app.command()
def check(
    form_file: Path = typer.Argument(..., help="Path to a form definition YAML file."),
) -> None:
    """Validate a form definition and print its page structure."""
    form = _load_form(form_file)
    typer.echo(f"Form {form.id}: {form.name or '(untitled)'}")
    for page in form.pages:
        typer.echo(_describe(page, 1))
        for line in _walk(page, 2):
            typer.echo(line)
    settings = form.settings
    typer.echo(
        f"{len(form.pages)} page(s), {sum(1 for _ in form.iter_fields())} field(s), "
        f"{len(settings.notifications)} notification(s), {len(settings.confirmations)} confirmation(s)"
    )


@app.command()
def render(
    ctx: typer.Context,
    form_file: Path = typer.Argument(..., help="Path to a form definition YAML file."),
    template: str = typer.Argument(..., help="Template text containing {tokens}."),
    values: str = typer.Option(
        "{}",
        "--values",
        help='Submitted values as a JSON object keyed by element id, e.g. \'{"3": "Ada"}\'.',
    ),
    output_format: TokenFormat = typer.Option(
        TokenFormat.TEXT,
        "--format",
        "-f",
        help="Output format for substituted values.",
    ),
) -> None:
    """Render a template against a form bound to sample values."""
    settings = _load_installation(ctx.obj)
    form = _load_form(form_file)

    try:
        submitted: Any = json.loads(values)
    except json.JSONDecodeError as e:
        _fail("Invalid Values", f"--values is not valid JSON: {e.msg}")
        raise typer.Exit(1) from None
    if not isinstance(submitted, dict):
        _fail("Invalid Values", "--values must be a JSON object")
        raise typer.Exit(1)

    form.bind(Submission(values=submitted))
    form.calculate_element_visibility()

    engine = TokenEngine(settings)
    typer.echo(engine.replace_variables(template, output_format, form, RequestContext()))
