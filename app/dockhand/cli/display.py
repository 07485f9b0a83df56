"""Rich display functions for run reports.

Provides the results table and summary printed after a convergence run.
"""

from rich.markup import escape
from rich.table import Table

from dockhand.core.errors import CorruptConfigError, UnsupportedPlatformError
from dockhand.models.desired import DesiredState
from dockhand.models.report import RunReport, StepStatus
from dockhand.utils.formatting import console, err_console, print_error, print_success

_STATUS_LABELS: dict[StepStatus, str] = {
    StepStatus.APPLIED: "[applied]APPLIED[/applied]",
    StepStatus.ALREADY_SATISFIED: "[satisfied]OK[/satisfied]",
    StepStatus.FAILED: "[error]FAIL[/error]",
}


def create_report_table(report: RunReport) -> Table:
    """Create a Rich table displaying every step of a run.

    Args:
        report: Report of the run.

    Returns:
        Rich Table with Status, Stage, Step and Detail columns.
    """
    title = "Convergence (Dry Run)" if report.dry_run else "Convergence"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Stage")
    table.add_column("Step", no_wrap=True)
    table.add_column("Detail")

    for step in report.steps:
        table.add_row(
            _STATUS_LABELS[step.status],
            step.stage.value,
            escape(step.step),
            f"[muted]{escape(step.detail)}[/muted]",
        )

    return table


def print_desired_state(desired: DesiredState) -> None:
    """Print the effective desired state (verbose mode)."""
    console.print("[info]Verbose mode enabled[/info]")
    console.print(f"Users: {escape(' '.join(desired.users)) or '-'}")
    console.print(f"Groups: {escape(' '.join(desired.groups)) or '-'}")
    console.print(f"MTU: {desired.mtu}")


def print_abort(report: RunReport) -> None:
    """Print the cause of an aborted run and the raw input behind it."""
    stage = report.abort_stage.value if report.abort_stage else "unknown stage"
    print_error(f"Aborted at {stage}: {report.abort_reason}")

    error = report.error
    if isinstance(error, UnsupportedPlatformError):
        if error.markers is None:
            err_console.print("[muted]Host identity source is missing.[/muted]")
        else:
            err_console.print("[muted]Host identity markers:[/muted]")
            err_console.print(escape(error.markers.rstrip()), highlight=False)
    elif isinstance(error, CorruptConfigError) and error.path is not None:
        err_console.print(f"[muted]Left untouched: {escape(str(error.path))}[/muted]")


def print_report_summary(report: RunReport) -> None:
    """Print a summary of a completed run.

    Shows a success message when nothing failed, or the non-fatal failures
    otherwise.

    Args:
        report: Report of the run.
    """
    applied = len(report.applied)
    satisfied = len(report.satisfied)
    failures = report.failures

    if not failures:
        print_success(f"Host converged: {applied} applied, {satisfied} already satisfied.")
        return

    console.print(
        f"\n[applied]{applied} applied[/applied], "
        f"[satisfied]{satisfied} already satisfied[/satisfied], "
        f"[error]{len(failures)} failed[/error]"
    )
    for step in failures:
        err_console.print(f"  [error]-[/error] {escape(step.step)}: {escape(step.detail)}")
