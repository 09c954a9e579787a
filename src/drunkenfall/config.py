"""Application configuration read from the environment."""

# Drunkenfall
# Copyright (C) 2025  Drunkenfall developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from drunkenfall.exceptions import InvalidConfigurationException
from drunkenfall.utils import ROOT_LOGGER_NAME, setup_logger

ENV_DATA_DIR = "DRUNKENFALL_DATA_DIR"
ENV_LOG_LEVEL = "DRUNKENFALL_LOG_LEVEL"
ENV_BROADCAST_WORKERS = "DRUNKENFALL_BROADCAST_WORKERS"

DEFAULT_DATA_DIR = "data"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_BROADCAST_WORKERS = 2


@dataclass
class AppConfig:
    """Process-wide settings.

    Attributes
    ----------
    data_dir : pathlib.Path
        Directory the JSON store writes tournaments and people into.
    log_level : str
        Name of the logging level for the ``drunkenfall`` logger.
    broadcast_workers : int
        Worker threads used for fire-and-forget broadcasts.
    """

    data_dir: Path = Path(DEFAULT_DATA_DIR)
    log_level: str = DEFAULT_LOG_LEVEL
    broadcast_workers: int = DEFAULT_BROADCAST_WORKERS

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InvalidConfigurationException(
                f"Unknown log level: {self.log_level}"
            )
        if self.broadcast_workers < 1:
            raise InvalidConfigurationException(
                f"broadcast_workers must be positive, got {self.broadcast_workers}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build the configuration from environment variables."""
        env = os.environ if environ is None else environ

        workers_raw = env.get(ENV_BROADCAST_WORKERS, str(DEFAULT_BROADCAST_WORKERS))
        try:
            workers = int(workers_raw)
        except ValueError as e:
            raise InvalidConfigurationException(
                f"{ENV_BROADCAST_WORKERS} must be an integer, got {workers_raw!r}"
            ) from e

        return cls(
            data_dir=Path(env.get(ENV_DATA_DIR, DEFAULT_DATA_DIR)),
            log_level=env.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
            broadcast_workers=workers,
        )

    def apply_logging(self) -> None:
        """Set the level of the package logger."""
        setup_logger(ROOT_LOGGER_NAME).setLevel(self.log_level)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "data_dir": str(self.data_dir),
            "log_level": self.log_level,
            "broadcast_workers": self.broadcast_workers,
        }
