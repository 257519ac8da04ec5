"""
Configuration management for place-html.

Loads settings from environment variables (and an optional .env file)
and provides structured configuration for the placement engine.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

DEFAULT_EXTENSION = ".js"
DEFAULT_TIMEZONE = "Europe/Amsterdam"
DEFAULT_TOOL_NAME = "place-html"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


@dataclass
class Config:
    """
    Central configuration for a placement run.

    Input and output directories are required; everything else has a default.
    """

    input_dir: Path
    output_dir: Path

    # Behaviour
    recursive: bool = False
    watch: bool = False
    debug: bool = False
    dry_run: bool = False

    # Placement details
    extension: str = DEFAULT_EXTENSION
    timezone: str = DEFAULT_TIMEZONE
    tool_name: str = DEFAULT_TOOL_NAME

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Path] = None,
        **overrides,
    ) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                     looks for .env in current directory.
            **overrides: Values that take precedence over the environment
                     (typically CLI options). ``None`` values are ignored.

        Returns:
            Configured Config instance.

        Raises:
            ValueError: If the input or output directory is missing or invalid.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        overrides = {k: v for k, v in overrides.items() if v is not None}

        input_dir = overrides.pop("input_dir", None) or os.getenv("PLACE_HTML_INPUT")
        if not input_dir:
            raise ValueError(
                "An input directory is required.\n"
                "Pass --input or set PLACE_HTML_INPUT to the directory containing the html files."
            )

        output_dir = overrides.pop("output_dir", None) or os.getenv("PLACE_HTML_OUTPUT")
        if not output_dir:
            raise ValueError(
                "An output directory is required.\n"
                "Pass --output or set PLACE_HTML_OUTPUT to the directory containing the js files."
            )

        values = {
            "recursive": _env_flag("PLACE_HTML_RECURSIVE"),
            "watch": _env_flag("PLACE_HTML_WATCH"),
            "debug": _env_flag("DEBUG"),
            "dry_run": _env_flag("DRY_RUN"),
            "extension": os.getenv("PLACE_HTML_EXTENSION", DEFAULT_EXTENSION),
            "timezone": os.getenv("PLACE_HTML_TIMEZONE", DEFAULT_TIMEZONE),
        }
        # Flags passed as False on the command line must not switch off
        # a value enabled in the environment.
        for key, value in overrides.items():
            if value is False and key in values:
                continue
            values[key] = value

        return cls(input_dir=Path(input_dir), output_dir=Path(output_dir), **values)

    def now(self) -> datetime:
        """Current time in the configured time zone."""
        return datetime.now(ZoneInfo(self.timezone))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.input_dir, str):
            self.input_dir = Path(self.input_dir)
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

        if not self.extension.startswith("."):
            self.extension = "." + self.extension

        if not self.input_dir.is_dir():
            raise ValueError(f"Input directory does not exist: {self.input_dir}")

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {self.timezone}") from e
