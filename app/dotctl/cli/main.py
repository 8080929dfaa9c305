"""Main CLI application entry point.

Defines the Typer application: exactly one of --setup or --takedown,
plus --force for non-interactive runs.
"""

from pathlib import Path
from typing import Annotated

import typer

from dotctl import __version__
from dotctl.core.config import ConfigError, ensure_settings, load_settings
from dotctl.core.confirm import get_confirmer
from dotctl.core.errors import DotctlError, UserDeclinedError
from dotctl.core.provision import Provisioner
from dotctl.utils.formatting import configure_logging, print_error, print_info, print_warning

app = typer.Typer(
    name="dotctl",
    help="Reversible dotfile and package provisioning.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dotctl version {__version__}")
        raise typer.Exit()


def _usage_error(ctx: typer.Context, message: str) -> None:
    """Print an error followed by usage and exit non-zero."""
    print_error(message)
    typer.echo(ctx.get_help())
    raise typer.Exit(code=1)


@app.command()
def main(
    ctx: typer.Context,
    setup: Annotated[
        bool,
        typer.Option("--setup", help="Run the setup process."),
    ] = False,
    takedown: Annotated[
        bool,
        typer.Option("--takedown", help="Run the takedown process."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Run in non-interactive mode (auto-confirms all prompts).",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file to use instead of ~/.config/dotctl/config.toml.",
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
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
    """Provision or de-provision this machine.

    [bold]--setup[/bold] deploys your dotfiles from a bare git repository
    (backing up anything they would overwrite) and installs the package
    plan. [bold]--takedown[/bold] uninstalls what setup installed and
    restores the files it displaced.

    Examples:
        dotctl --setup
        dotctl --takedown --force
    """
    configure_logging(verbose)

    if setup and takedown:
        _usage_error(ctx, "Options --setup and --takedown are mutually exclusive.")
    if not setup and not takedown:
        _usage_error(ctx, "No action specified (--setup or --takedown).")

    try:
        # A first setup leaves an editable config.toml behind
        settings = ensure_settings(config) if setup else load_settings(config)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    provisioner = Provisioner(settings, get_confirmer(force))
    try:
        if setup:
            provisioner.setup()
        else:
            provisioner.takedown()
    except UserDeclinedError as e:
        print_warning(f"{e}. Exiting.")
        raise typer.Exit(code=1) from e
    except DotctlError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_info("dotctl finished.")


if __name__ == "__main__":
    app()
