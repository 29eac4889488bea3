"""
Shared constants for Jestify.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

import os as _os

# Execution defaults
DEFAULT_TIMEOUT_MS = 5000
"""Default timeout applied to every suite run and test run (5 seconds)."""

DEFAULT_MAX_PARALLELISM = _os.cpu_count() or 1
"""Default cap on concurrently running cases of a parallel `each`."""

# Naming
RESULTS_LOGGER_NAME = "jestify.results"
"""Logger that LoggingReporter writes test outcomes to."""

CONFIG_DIR_NAME = "jestify"
"""Directory name under ~/.config for the user config file."""

PROJECT_CONFIG_DIR_NAME = ".jestify"
"""Directory name in the project root for the project config file."""

CONFIG_FILE_NAME = "config.yaml"
"""File name of both the user and the project config file."""

ENV_PREFIX = "JESTIFY_"
"""Prefix for environment variable overrides."""
