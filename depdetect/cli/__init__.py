"""CLI module for depdetect.

This module provides the command-line interface. It supports both CLI
arguments and environment variables for configuration.
"""

from .main import (
    Config,
    build_config,
    cli,
    evaluate_boolean,
    load_config,
    main,
    run_scan,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "build_config",
    "load_config",
    "run_scan",
    "evaluate_boolean",
]
