"""CLI commands using Typer."""

import asyncio
import logging
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from unlock_automation.automation import StatusFlow, SubmissionFlow
from unlock_automation.browser import shutdown_session_manager
from unlock_automation.config import get_settings
from unlock_automation.errors import SessionOpenError
from unlock_automation.models import (
    RequestStatus,
    StatusQuery,
    StatusResult,
    SubmissionResult,
    UnlockSubmission,
    mask_imei,
)

app = typer.Typer(
    name="unlock-portal",
    help="Device unlock portal automation CLI",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    RequestStatus.APPROVED: "green",
    RequestStatus.PENDING: "yellow",
    RequestStatus.DENIED: "red",
    RequestStatus.UNKNOWN: "dim",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def format_errors(error: ValidationError) -> str:
    """Render pydantic validation errors one per line."""
    lines = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "input"
        lines.append(f"  {field}: {err['msg']}")
    return "\n".join(lines)


async def run_flow(coro):
    """Await a flow and always release the shared browser afterwards."""
    try:
        return await coro
    finally:
        await shutdown_session_manager()


@app.command()
def submit(
    imei: Annotated[str, typer.Option("--imei", "-i", help="15-digit device IMEI")],
    first_name: Annotated[str, typer.Option("--first-name", help="Account holder first name")],
    last_name: Annotated[str, typer.Option("--last-name", help="Account holder last name")],
    email: Annotated[str, typer.Option("--email", "-e", help="Contact email")],
    carrier_number: Annotated[
        str | None, typer.Option("--carrier-number", "-n", help="10-digit carrier number, if any")
    ] = None,
):
    """
    Submit a device unlock request.

    Example:
        unlock-portal submit --imei 353012345678901 --first-name Juan --last-name Pérez --email juan@example.com
    """
    try:
        request = UnlockSubmission(
            imei=imei,
            carrier_number=carrier_number or None,
            first_name=first_name,
            last_name=last_name,
            email=email,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid request:[/red]\n{format_errors(e)}")
        raise typer.Exit(2)

    console.print(
        Panel(
            f"[bold]IMEI:[/bold] {mask_imei(request.imei)}\n"
            f"[bold]Name:[/bold] {request.first_name} {request.last_name}\n"
            f"[bold]Email:[/bold] {request.email}\n"
            f"[bold]Carrier number:[/bold] {'yes' if request.has_carrier_number else 'no'}",
            title="Unlock Request",
        )
    )
    console.print("[dim]Submitting to the portal...[/dim]")

    try:
        result = asyncio.run(run_flow(SubmissionFlow().submit(request)))
    except SessionOpenError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    print_submission_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def status(
    imei: Annotated[str, typer.Option("--imei", "-i", help="15-digit device IMEI")],
    request_id: Annotated[str, typer.Option("--request-id", "-r", help="Confirmation id from the portal")],
):
    """
    Check the status of a submitted unlock request.

    Example:
        unlock-portal status --imei 353012345678901 --request-id NUL117557332822
    """
    try:
        query = StatusQuery(imei=imei, confirmation_id=request_id)
    except ValidationError as e:
        console.print(f"[red]Invalid query:[/red]\n{format_errors(e)}")
        raise typer.Exit(2)

    console.print(f"[dim]Checking status for {mask_imei(query.imei)} / {query.confirmation_id}...[/dim]")

    try:
        result = asyncio.run(run_flow(StatusFlow().check(query)))
    except SessionOpenError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    print_status_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def config():
    """Show the effective configuration."""
    settings = get_settings()

    table = Table(title="Configuration")
    table.add_column("Setting")
    table.add_column("Value")

    for name in (
        "app_env",
        "unlock_url",
        "status_url",
        "browser_headless",
        "browser_timeout",
        "selector_timeout",
        "step_settle_ms",
        "debug_enabled",
        "screenshot_dir",
        "portal_profile_path",
    ):
        value = getattr(settings, name)
        table.add_row(name, str(value.value if hasattr(value, "value") else value))

    console.print(table)


def print_submission_result(result: SubmissionResult) -> None:
    """Render a submission result."""
    if result.success:
        deadline = result.deadline.strftime("%Y-%m-%d %H:%M UTC") if result.deadline else "-"
        console.print(
            Panel(
                f"[bold green]Request submitted[/bold green]\n\n"
                f"[bold]Confirmation id:[/bold] {result.confirmation_id or 'not shown'}\n"
                f"[bold]Check status after:[/bold] {deadline}",
                title="Result",
            )
        )
    elif result.captcha_detected:
        console.print(
            Panel(
                "[bold yellow]CAPTCHA detected[/bold yellow]\n\n"
                "The portal is asking for a human check. Submit this request manually.",
                title="Result",
            )
        )
    else:
        console.print(
            Panel(
                f"[bold red]Submission failed[/bold red]\n\n{result.error_message}",
                title="Result",
            )
        )


def print_status_result(result: StatusResult) -> None:
    """Render a status check result."""
    if not result.success:
        console.print(Panel(f"[bold red]Status check failed[/bold red]\n\n{result.error_message}", title="Status"))
        return

    style = STATUS_STYLES[result.status]
    body = f"[bold {style}]{result.status.value.upper()}[/bold {style}]"
    if result.details:
        body += f"\n\n{result.details}"
    console.print(Panel(body, title="Status"))


if __name__ == "__main__":
    app()
