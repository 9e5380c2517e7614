"""CLI command implementations for ncsetup.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .init import init
from .install import install
from .plan import plan
from .status import status

__all__ = ["init", "install", "plan", "status"]
