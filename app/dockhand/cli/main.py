"""Main CLI application entry point.

Defines the Typer application: one command that converges the host.
"""

from pathlib import Path
from typing import Annotated, Any

import click
import typer
from typer.core import TyperCommand

from dockhand import __version__
from dockhand.cli.display import (
    create_report_table,
    print_abort,
    print_desired_state,
    print_report_summary,
)
from dockhand.core.converge import Converger
from dockhand.core.desired import DesiredStateError, build_desired_state
from dockhand.utils.formatting import (
    console,
    print_error,
    print_info,
    print_warning,
    setup_logging,
)
from dockhand.utils.shell import is_root

app = typer.Typer(
    name="dockhand",
    help="Declarative container host provisioning.",
    rich_markup_mode="rich",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


class ConvergeCommand(TyperCommand):
    """Command that exits with status 1 on usage errors."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dockhand version {__version__}")
        raise typer.Exit()


@app.command(cls=ConvergeCommand)
def main(
    users: Annotated[
        str | None,
        typer.Option("--users", help='Space-separated users to create, e.g. "ed kelly".'),
    ] = None,
    groups: Annotated[
        str | None,
        typer.Option("--groups", help="Space-separated groups; every user joins every group."),
    ] = None,
    mtu: Annotated[
        int | None,
        typer.Option("--mtu", help="Container network MTU [default: 1500]."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would change without changing it."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Desired-state TOML file."),
    ] = None,
    daemon_config: Annotated[
        Path | None,
        typer.Option("--daemon-config", hidden=True),
    ] = None,
    os_release: Annotated[
        Path | None,
        typer.Option("--os-release", hidden=True),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Converge this host: install the container runtime, create users and
    groups, and merge the daemon configuration.

    Safe to run repeatedly; a converged host is left unchanged.
    """
    setup_logging(verbose)

    overrides: dict[str, Any] = {
        "users": users,
        "groups": groups,
        "mtu": mtu,
        "verbose": True if verbose else None,
    }
    try:
        desired = build_desired_state(overrides, config)
    except DesiredStateError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if desired.verbose:
        setup_logging(True)
        print_desired_state(desired)

    if dry_run:
        print_info("Dry run: no changes will be made.")
    elif not is_root():
        print_warning("Not running as root: commands will be run through sudo.")

    report = Converger(
        desired,
        os_release_path=os_release,
        daemon_config_path=daemon_config,
        dry_run=dry_run,
    ).run()

    console.print(create_report_table(report))

    if report.aborted:
        print_abort(report)
        raise typer.Exit(code=1)

    print_report_summary(report)


if __name__ == "__main__":
    app()
