"""Audit log entries for tournaments and matches."""

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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from drunkenfall.models.person import Person
from drunkenfall.utils import from_iso, to_iso, utc_now


def _plain(value: Any) -> Any:
    """Reduce an event item to something JSON can hold."""
    if isinstance(value, Person):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, datetime):
        return to_iso(value)
    return value


@dataclass
class Event:
    """Something that happened, and who made it happen.

    Attributes
    ----------
    kind : str
        One of the ``constants.EV_*`` kinds.
    message : str
        Message template. ``{name}`` placeholders are filled from ``items``.
    items : dict
        Values referenced by the message. ``person`` holds the acting person,
        or None for system-triggered events.
    time : datetime
        When the event was logged.
    """

    kind: str
    message: str
    items: Dict[str, Any] = field(default_factory=dict)
    time: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, kind: str, message: str, **items: Any) -> "Event":
        return cls(kind=kind, message=message, items={k: _plain(v) for k, v in items.items()})

    @property
    def person(self) -> Optional[Dict[str, Any]]:
        return self.items.get("person")

    def render(self) -> str:
        """Fill the message template from the items."""
        values = dict(self.items)
        if isinstance(values.get("person"), dict):
            values["person"] = values["person"].get("nick", "")
        try:
            return self.message.format(**values)
        except (KeyError, IndexError):
            return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to dictionary."""
        return {
            "kind": self.kind,
            "message": self.message,
            "items": self.items,
            "time": to_iso(self.time),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Deserialize event from dictionary."""
        return cls(
            kind=data["kind"],
            message=data.get("message", ""),
            items=dict(data.get("items", {})),
            time=from_iso(data.get("time")) or utc_now(),
        )
