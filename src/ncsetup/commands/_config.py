"""Configuration loading shared by commands."""

from pathlib import Path
from typing import Any

import typer

from ..config import ProvisionConfig, apply_overrides, load_config
from ..constants import DEFAULT_CONFIG_NAME
from ..errors import ConfigError
from ..output import get_output_context


def load_or_exit(path: Path | None, **overrides: Any) -> ProvisionConfig:
    """Load the config file and apply CLI overrides, exiting 3 when invalid."""
    ctx = get_output_context()
    try:
        config = load_config(path or Path(DEFAULT_CONFIG_NAME))
        return apply_overrides(config, **overrides)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(3) from None
