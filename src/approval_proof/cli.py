"""
approval-proof CLI entry point.

Usage:
    approval-proof [OPTIONS] COMMAND [ARGS]...
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from .amounts import WholeAmountStyle
from .batch import ProofBatchVerifier
from .config import load_settings
from .exceptions import ApprovalProofError
from .loader import load_request
from .logging_config import BatchLogContext, setup_logging
from .message import build_canonical_message
from .models import ValidationResult
from .signature import load_verification_key
from .summary import log_summary, summary_line

console = Console()
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_FATAL = 2

_WHOLE_AMOUNT_CHOICES = {
    "two-decimals": WholeAmountStyle.TWO_DECIMALS,
    "one-decimal": WholeAmountStyle.ONE_DECIMAL,
}

whole_amounts_option = click.option(
    "--whole-amounts",
    type=click.Choice(sorted(_WHOLE_AMOUNT_CHOICES)),
    default=None,
    help="How whole amounts are written in the canonical message (default from settings).",
)


def _whole_style(ctx: click.Context, choice: Optional[str]) -> WholeAmountStyle:
    if choice:
        return _WHOLE_AMOUNT_CHOICES[choice]
    return ctx.obj["settings"].whole_amount_style


def _print_error(source: str, error: ApprovalProofError) -> None:
    console.print(f"✗ {source}: {error.message}", style="red", markup=False, soft_wrap=True, highlight=False)


@click.group()
@click.version_option(package_name="approval-proof", message="%(prog)s %(version)s")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, json_logs: bool, verbose: bool):
    """Verify proof-of-approval signatures on validation results."""
    ctx.ensure_object(dict)

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=json_logs or settings.log_json,
    )

    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False))
@whole_amounts_option
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Verify items on N threads")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON report instead of summary lines")
@click.option("--show-messages", is_flag=True, help="Print each canonical message")
@click.pass_context
def verify(
    ctx,
    paths: tuple[str, ...],
    whole_amounts: Optional[str],
    workers: Optional[int],
    as_json: bool,
    show_messages: bool,
):
    """Verify every signature in one or more request files."""
    verifier = ProofBatchVerifier(
        ctx.obj["settings"],
        whole_style=_whole_style(ctx, whole_amounts),
        max_workers=workers,
    )

    exit_code = EXIT_OK
    reports: list[dict[str, Any]] = []

    for path in paths:
        with BatchLogContext():
            try:
                request = load_request(path)
                report = verifier.verify_batch(request)
            except ApprovalProofError as e:
                logger.error("Verification of %s aborted: %s", path, e.message, extra={"error_code": e.error_code})
                exit_code = EXIT_FATAL
                if as_json:
                    reports.append({"source": path, **e.to_dict()})
                else:
                    _print_error(path, e)
                continue
            log_summary(report)

        if not report.all_valid:
            exit_code = max(exit_code, EXIT_INVALID)

        if as_json:
            reports.append({"source": path, **report.to_dict()})
            continue

        if len(paths) > 1:
            console.print(f"\n[bold blue]{path}[/bold blue]", soft_wrap=True, highlight=False)
        for outcome in report.outcomes:
            style = "green" if outcome.is_valid else "red"
            console.print(summary_line(outcome), style=style, markup=False, soft_wrap=True, highlight=False)
            if show_messages and outcome.canonical_message is not None:
                console.print(f"   {outcome.canonical_message}", markup=False, soft_wrap=True, highlight=False)
            if outcome.errored:
                console.print(
                    f"   {outcome.error_code}: {outcome.error_message}",
                    style="yellow",
                    markup=False,
                    soft_wrap=True,
                    highlight=False,
                )

    if as_json:
        click.echo(json.dumps(reports[0] if len(reports) == 1 else reports, indent=2))

    ctx.exit(exit_code)


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--index", type=click.IntRange(min=0), default=None, help="Only the result at this position")
@whole_amounts_option
@click.pass_context
def message(ctx, path: str, index: Optional[int], whole_amounts: Optional[str]):
    """Print canonical messages without verifying signatures."""
    whole_style = _whole_style(ctx, whole_amounts)
    try:
        request = load_request(path)
    except ApprovalProofError as e:
        _print_error(path, e)
        ctx.exit(EXIT_FATAL)

    items = list(request.iter_results())
    if index is not None:
        if index >= len(items):
            raise click.BadParameter(f"request has {len(items)} results", param_hint="--index")
        items = [items[index]]

    exit_code = EXIT_OK
    for position, item in items:
        try:
            result = ValidationResult.coerce(item)
            click.echo(build_canonical_message(result, whole_style=whole_style))
        except ApprovalProofError as e:
            _print_error(f"result {position}", e)
            exit_code = EXIT_INVALID
    ctx.exit(exit_code)


@cli.command("inspect-cert")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def inspect_cert(ctx, path: str):
    """Show the certificate carried by a request file."""
    try:
        request = load_request(path)
        key = load_verification_key(request.public_key)
    except ApprovalProofError as e:
        _print_error(path, e)
        ctx.exit(EXIT_FATAL)

    info = key.info
    table = Table(title="Signing certificate", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Subject", info.subject)
    table.add_row("Issuer", info.issuer)
    table.add_row("Serial", format(info.serial_number, "x"))
    table.add_row("Valid from", info.not_valid_before.isoformat())
    table.add_row("Valid until", info.not_valid_after.isoformat())
    table.add_row("Key", f"RSA {info.key_size} bits")
    console.print(table)
    console.print(
        "[dim]Informational only: trust, expiry and revocation are not checked.[/dim]"
    )


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
