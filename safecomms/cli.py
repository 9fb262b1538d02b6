"""SafeComms CLI: moderate text and images and check usage from a shell."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from safecomms import __version__
from safecomms.client import SafeCommsClient
from safecomms.errors import SafeCommsError
from safecomms.models import ImageModerationOptions, ModerationOptions, ModerationResult, ReplaceSeverity

console = Console()

EXIT_FLAGGED = 1
EXIT_ERROR = 2

_SEVERITIES = [s.value for s in ReplaceSeverity]


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.getenv("SAFECOMMS_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _make_client(ctx: click.Context) -> SafeCommsClient:
    return SafeCommsClient(
        api_key=ctx.obj["api_key"],
        base_url=ctx.obj["base_url"],
        timeout=ctx.obj["timeout"],
    )


def _fail(ctx: click.Context, exc: SafeCommsError) -> None:
    console.print(f"[red]Error ({type(exc).__name__}):[/] {escape(exc.message)}")
    ctx.exit(EXIT_ERROR)


def _print_result(result: ModerationResult, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json", exclude_none=True), indent=2))
        return

    verdict = "[green]clean[/]" if result.is_clean else "[red]flagged[/]"
    table = Table(title="Moderation Result", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Verdict", verdict)
    if result.severity:
        table.add_row("Severity", escape(result.severity))
    if result.reason:
        table.add_row("Reason", escape(result.reason))
    if result.is_bypass_attempt:
        table.add_row("Bypass attempt", "[yellow]yes[/]")
    if result.category_scores:
        scores = ", ".join(f"{k}={v}" for k, v in result.category_scores.items())
        table.add_row("Categories", escape(scores))
    for issue in result.issues or []:
        table.add_row("Issue", escape(f"{issue.term or '?'}: {issue.context or ''}"))
    if result.safe_content is not None:
        table.add_row("Safe content", escape(result.safe_content))
    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option("--api-key", default=None, help="API key (default: $SAFECOMMS_API_KEY)")
@click.option("--base-url", default=None, help="Service URL (default: $SAFECOMMS_BASE_URL)")
@click.option("--timeout", default=None, type=float, help="Request timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Log each request")
@click.pass_context
def main(ctx: click.Context, api_key: str | None, base_url: str | None, timeout: float | None, verbose: bool):
    """SafeComms content moderation from the command line.

    Exits 0 when content is clean, 1 when it is flagged and 2 on errors.
    """
    _configure_logging(verbose)
    ctx.obj = {"api_key": api_key, "base_url": base_url, "timeout": timeout}


# ── Moderate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.option("--language", default=None, help="ISO language code")
@click.option("--replace/--no-replace", default=None, help="Return redacted text")
@click.option("--pii/--no-pii", default=None, help="Scan for personal information")
@click.option("--replace-severity", default=None, type=click.Choice(_SEVERITIES))
@click.option("--profile", "profile_id", default=None, help="Moderation profile id")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON")
@click.pass_context
def moderate(
    ctx: click.Context,
    text: str,
    language: str | None,
    replace: bool | None,
    pii: bool | None,
    replace_severity: str | None,
    profile_id: str | None,
    as_json: bool,
):
    """Moderate TEXT."""
    options = ModerationOptions(
        language=language,
        replace=replace,
        pii=pii,
        replace_severity=replace_severity,
        moderation_profile_id=profile_id,
    )
    try:
        with _make_client(ctx) as client:
            result = client.moderate_text(text, options)
    except SafeCommsError as exc:
        _fail(ctx, exc)
        return

    _print_result(result, as_json)
    if not result.is_clean:
        ctx.exit(EXIT_FLAGGED)


# ── Image ────────────────────────────────────────────────────────────


@main.command()
@click.argument("source")
@click.option("--language", default=None, help="ISO language code")
@click.option("--profile", "profile_id", default=None, help="Moderation profile id")
@click.option("--ocr/--no-ocr", default=None, help="Extract and moderate text in the image")
@click.option("--enhanced-ocr/--no-enhanced-ocr", default=None)
@click.option("--metadata/--no-metadata", default=None, help="Extract image metadata")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON")
@click.pass_context
def image(
    ctx: click.Context,
    source: str,
    language: str | None,
    profile_id: str | None,
    ocr: bool | None,
    enhanced_ocr: bool | None,
    metadata: bool | None,
    as_json: bool,
):
    """Moderate an image.

    SOURCE is a local file (uploaded) or an image URL / base64 string.
    """
    options = ImageModerationOptions(
        language=language,
        moderation_profile_id=profile_id,
        enable_ocr=ocr,
        enhanced_ocr=enhanced_ocr,
        extract_metadata=metadata,
    )
    try:
        with _make_client(ctx) as client:
            if Path(source).is_file():
                result = client.moderate_image_file(source, options)
            else:
                result = client.moderate_image(source, options)
    except SafeCommsError as exc:
        _fail(ctx, exc)
        return

    _print_result(result, as_json)
    if not result.is_clean:
        ctx.exit(EXIT_FLAGGED)


# ── Usage ────────────────────────────────────────────────────────────


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print the raw report as JSON")
@click.pass_context
def usage(ctx: click.Context, as_json: bool):
    """Show token usage for the current API key."""
    try:
        with _make_client(ctx) as client:
            report = client.get_usage()
    except SafeCommsError as exc:
        _fail(ctx, exc)
        return

    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json", exclude_none=True), indent=2))
        return

    table = Table(title="Usage")
    table.add_column("Tier", style="cyan")
    table.add_column("Tokens used", justify="right", style="green")
    table.add_column("Token limit", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Rate limit", justify="right")

    def _fmt(value: object) -> str:
        return "-" if value is None else str(value)

    table.add_row(
        escape(report.tier or "-"),
        str(report.tokens_used),
        _fmt(report.token_limit),
        _fmt(report.remaining_tokens),
        _fmt(report.rate_limit),
    )
    console.print(table)
