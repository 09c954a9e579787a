"""Shared helpers: logging setup, id generation and timestamps."""

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
import uuid
from datetime import datetime, timezone
from typing import Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

ROOT_LOGGER_NAME = "drunkenfall"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """Return a module logger hanging off the application root logger.

    The root ``drunkenfall`` logger gets a single stream handler the first
    time this is called. The level is read from ``DRUNKENFALL_LOG_LEVEL``.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        level = os.environ.get("DRUNKENFALL_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier, optionally prefixed."""
    uid = uuid.uuid4().hex
    return f"{prefix.lower()}-{uid}" if prefix else uid


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def minutes_from_now(minutes: int, now: Optional[datetime] = None) -> datetime:
    """Return the time ``minutes`` after ``now`` (defaults to the current time)."""
    return (now or utc_now()) + relativedelta(minutes=+minutes)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime to ISO-8601, keeping unset values as None."""
    if value is None:
        return None
    return value.isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string back into a datetime."""
    if not value:
        return None
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
