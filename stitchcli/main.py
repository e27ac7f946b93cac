"""Main entry point for the stitchcli application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from stitchcli import __version__
from stitchcli.core.client import StitchLabsClient
from stitchcli.core.command_handler import CommandHandler

# --- Infrastructure Layer ---
# Config
from stitchcli.infrastructure.config.settings import get_client_options, get_config, load_configuration
# UI
from stitchcli.infrastructure.cli.display import ConsoleDisplay
# Monitoring
from stitchcli.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, level_from_name, setup_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

_dependencies: Dict[str, Any] = {}

def create_client() -> StitchLabsClient:
    """Builds a client from the loaded configuration.

    Raises:
        ConfigError: If no access token is configured.
    """
    return StitchLabsClient(**get_client_options())

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. The client itself is created per
    command by the handler, so a missing token only fails API commands.
    """
    logger.info("Initializing application dependencies...")
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['command_handler'] = CommandHandler(
        client_factory=create_client,
        ui=dependencies['ui'],
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies

def get_command_handler() -> CommandHandler:
    """Returns the wired command handler, creating dependencies on first use."""
    if not _dependencies:
        _dependencies.update(create_dependencies())
    return _dependencies['command_handler']

# --- Typer App Definition ---
app = typer.Typer(
    name="stitchcli",
    help=f"stitchcli v{__version__}: rate-limited, cached client for the Stitch Labs API.",
    add_completion=False,
)

# --- CLI Commands ---

BodyOption = Annotated[
    Optional[str],
    typer.Option("--body", "-b", help="JSON object merged into the request body (e.g. '{\"page_num\": 2}')."),
]

OutputOption = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", dir_okay=False, writable=True, help="Write the JSON result to this file."),
]

@app.command()
def fetch(
    url: Annotated[str, typer.Argument(help="Endpoint path or URL, e.g. 'api2/v2/Products'.")],
    body: BodyOption = None,
    method: Annotated[Optional[str], typer.Option("--method", "-m", help="HTTP method (default POST).")] = None,
    output: OutputOption = None,
):
    """Perform a single request and print the raw response."""
    handler = get_command_handler()
    code = asyncio.run(handler.handle_fetch(url, body=body, method=method, output=output))
    raise typer.Exit(code)

@app.command(name="fetch-all")
def fetch_all(
    url: Annotated[str, typer.Argument(help="Endpoint path or URL, e.g. 'api2/v2/Products'.")],
    body: BodyOption = None,
    output: OutputOption = None,
):
    """Fetch every page of a query and merge the records by resource type."""
    handler = get_command_handler()
    code = asyncio.run(handler.handle_fetch_all(url, body=body, output=output))
    raise typer.Exit(code)

@app.command(name="variant-url")
def variant_url_command(
    record_file: Annotated[Path, typer.Argument(
        exists=True, file_okay=True, dir_okay=False, readable=True,
        help="JSON file holding one variant record.")],
):
    """Print the Stitch web app link for a variant record."""
    handler = get_command_handler()
    consumer_url = get_config('stitch.consumer_url', coerce=False)
    code = handler.handle_variant_url(record_file, str(consumer_url) if consumer_url else None)
    raise typer.Exit(code)

@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
):
    """Loads configuration and sets up logging before any command runs."""
    load_configuration()
    log_level = logging.DEBUG if verbose else level_from_name(get_config('logging.level'))
    setup_logging(
        log_level=log_level,
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )
    logger.debug(f"stitchcli {__version__} starting (verbose={verbose})")

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
