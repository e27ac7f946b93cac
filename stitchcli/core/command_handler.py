"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work
to the StitchLabsClient and renders results through the ConsoleDisplay.
Client errors are shown to the user and reported as a non-zero exit code.
"""

import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

# Core Imports
from stitchcli.core.client import StitchLabsClient
from stitchcli.core.services.links import variant_url

# Domain Layer Imports
from stitchcli.domain.exceptions import StitchClientError

# Infrastructure Layer Imports
from stitchcli.infrastructure.cli.display import ConsoleDisplay

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

ClientAction = Callable[[StitchLabsClient], Awaitable[None]]

def parse_body(body: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parses the --body option (a JSON object) into a dict.

    Raises:
        ValueError: If the text is not a JSON object.
    """
    if not body:
        return None
    parsed = json.loads(body)
    if not isinstance(parsed, dict):
        raise ValueError("request body must be a JSON object")
    return parsed

class CommandHandler:
    """Handles incoming commands and delegates to the client."""

    def __init__(self, client_factory: Callable[[], StitchLabsClient], ui: ConsoleDisplay):
        """Initializes the CommandHandler.

        Args:
            client_factory: Creates a configured client; called once per
                API command so commands without API access need no token.
            ui: Console used for results and errors.
        """
        self.client_factory = client_factory
        self.ui = ui

    def _build_request(self, url: str, body: Optional[str], method: Optional[str]) -> Dict[str, Any]:
        request: Dict[str, Any] = {"url": url}
        parsed_body = parse_body(body)
        if parsed_body is not None:
            request["body"] = parsed_body
        if method:
            request["method"] = method.upper()
        return request

    def _write_output(self, data: Any, output: Optional[Path]) -> None:
        if output is None:
            self.ui.display_json(data)
            return
        output.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        self.ui.display_info(f"Wrote {output}")

    async def _run_with_client(self, command: str, action: ClientAction) -> int:
        """Creates a client, runs one command against it and closes it."""
        try:
            client = self.client_factory()
        except StitchClientError as e:
            logger.error(f"Cannot create client for '{command}': {e}")
            self.ui.display_error(f"Configuration error: {e}")
            return EXIT_FAILURE

        try:
            await action(client)
            return EXIT_OK
        except StitchClientError as e:
            logger.error(f"'{command}' failed: {e}")
            self.ui.display_error(str(e))
        except OSError as e:
            self.ui.display_error(f"Could not write output: {e}")
        finally:
            await client.close()
        return EXIT_FAILURE

    async def handle_fetch(
        self,
        url: str,
        body: Optional[str] = None,
        method: Optional[str] = None,
        output: Optional[Path] = None,
    ) -> int:
        """Handles the 'fetch' command: one request, raw response."""
        logger.info(f"Handling 'fetch' for {url}")
        try:
            request = self._build_request(url, body, method)
        except ValueError as e:
            self.ui.display_error(f"Invalid --body: {e}")
            return EXIT_FAILURE

        async def fetch(client: StitchLabsClient) -> None:
            response = await client.request(request)
            self._write_output(response, output)

        return await self._run_with_client("fetch", fetch)

    async def handle_fetch_all(
        self,
        url: str,
        body: Optional[str] = None,
        output: Optional[Path] = None,
    ) -> int:
        """Handles the 'fetch-all' command: every page, merged by resource."""
        logger.info(f"Handling 'fetch-all' for {url}")
        try:
            request = self._build_request(url, body, None)
        except ValueError as e:
            self.ui.display_error(f"Invalid --body: {e}")
            return EXIT_FAILURE

        async def fetch_all(client: StitchLabsClient) -> None:
            merged = await client.request_all(request)
            self.ui.display_summary(merged, title=f"Records for {url}")
            if output is not None:
                self._write_output(merged, output)

        return await self._run_with_client("fetch-all", fetch_all)

    def handle_variant_url(self, record_file: Path, consumer_url: Optional[str]) -> int:
        """Handles the 'variant-url' command for a variant record JSON file."""
        try:
            record = json.loads(record_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.ui.display_error(f"Could not read variant record {record_file}: {e}")
            return EXIT_FAILURE

        url = variant_url(record, consumer_url) if isinstance(record, dict) else None
        if url is None:
            self.ui.display_error("Variant URL not available (needs consumer_url, id and links.Products[0].id).")
            return EXIT_FAILURE
        self.ui.display_output(url)
        return EXIT_OK
