"""Logging for gqlcompose with rich console output and CLI helpers."""

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class ComposeLogger(logging.Logger):
    """
    Logger used across gqlcompose.

    Registry bookkeeping goes to the standard levels (debug, info, warning, error),
    while the CLI uses the display helpers (success, rule, print_dict, key_value).
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        """
        Initialize the logger with a rich console handler.

        Args:
            name: Logger name
            level: Initial log level
        """
        super().__init__(name, level)
        self.console = Console()

        handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def print(self, message: str) -> None:
        """Print a plain message (with Rich markup support)."""
        self.console.print(message)

    def success(self, message: str) -> None:
        """
        Print a success message in green with checkmark icon.

        Args:
            message: Message to display
        """
        self.print(f"[green]✓[/green] {message}")

    def rule(self, title: str, style: str = "bold blue") -> None:
        """
        Print a horizontal rule with a title.

        Args:
            title: Title text for the rule
            style: Rich style string (default: "bold blue")
        """
        self.console.rule(f"[{style}]{title}")

    def print_dict(self, data: dict[str, Any]) -> None:
        """
        Print dictionary data as highlighted JSON.

        Args:
            data: Dictionary to display
        """
        self.console.print_json(json.dumps(data, indent=2))

    def key_value(self, key: str, value: Any, key_style: str = "dim") -> None:
        """
        Print a formatted key-value pair.

        Args:
            key: The key/label to display
            value: The value to display
            key_style: Style for the key (default: "dim")
        """
        self.print(f"[{key_style}]{key}:[/{key_style}] {value}")


def get_logger(name: str = "gqlcompose") -> ComposeLogger:
    """
    Get or create a gqlcompose logger instance.

    Args:
        name: Logger name (default: "gqlcompose")

    Returns:
        ComposeLogger instance
    """
    logging.setLoggerClass(ComposeLogger)
    logger = logging.getLogger(name)
    logging.setLoggerClass(logging.Logger)

    return logger  # type: ignore[return-value]
