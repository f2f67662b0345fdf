# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Logging setup for the command-line interface."""

import logging
import os
import sys
from typing import Optional

from .config import DEFAULT_LOG_LEVEL

ENV_LOG_LEVEL = "FREELANCE_FINSIGHT_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(cli_level: Optional[str] = None, config_level: Optional[str] = None) -> str:
    """Pick the level name: CLI flag, then config, then environment, then WARNING."""
    for candidate in (cli_level, config_level, os.environ.get(ENV_LOG_LEVEL)):
        if candidate:
            name = candidate.upper()
            if isinstance(logging.getLevelName(name), int):
                return name
    return DEFAULT_LOG_LEVEL


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Attach a stderr handler to the package logger and set its level.

    Calling it again replaces the previously installed handler.
    """
    logger = logging.getLogger("freelance_finsight")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(logger.handlers):
        if getattr(handler, "_freelance_finsight", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    handler._freelance_finsight = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    logger.debug("Logging initialized at %s", level.upper())
    return logger
