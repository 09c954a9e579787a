"""A store writing one JSON file per tournament and person."""

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

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Union

from drunkenfall.constants import SAVE_FILE_EXTENSION
from drunkenfall.exceptions import PersistenceException
from drunkenfall.storage.store import Record, Store
from drunkenfall.utils import setup_logger

logger = setup_logger(__name__)


class JsonFileStore(Store):
    """Stores records under ``directory/tournaments`` and ``directory/people``.

    Files are written to a temporary file next to the target and moved into
    place, so a crash never leaves a half written record behind.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self.tournament_dir = self.directory / "tournaments"
        self.people_dir = self.directory / "people"
        self._lock = threading.Lock()

        try:
            self.tournament_dir.mkdir(parents=True, exist_ok=True)
            self.people_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceException(
                f"Cannot create data directory {self.directory}: {e}"
            ) from e

    # ========== Files ==========

    def _path(self, folder: Path, key: str) -> Path:
        return folder / f"{key}{SAVE_FILE_EXTENSION}"

    def _write(self, path: Path, data: Record) -> None:
        with self._lock:
            fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp, path)
            except (OSError, TypeError, ValueError) as e:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise PersistenceException(f"Could not write {path}: {e}") from e
        logger.debug(f"Wrote {path}")

    def _read(self, path: Path) -> Optional[Record]:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceException(f"Could not read {path}: {e}") from e

    def _read_all(self, folder: Path) -> List[Record]:
        records = []
        for path in sorted(folder.glob(f"*{SAVE_FILE_EXTENSION}")):
            data = self._read(path)
            if data is not None:
                records.append(data)
        return records

    # ========== Tournaments ==========

    def save_tournament(self, tournament_id: str, data: Record) -> None:
        self._write(self._path(self.tournament_dir, tournament_id), data)

    def load_tournament(self, tournament_id: str) -> Optional[Record]:
        return self._read(self._path(self.tournament_dir, tournament_id))

    def load_tournaments(self) -> List[Record]:
        return self._read_all(self.tournament_dir)

    def delete_tournament(self, tournament_id: str) -> None:
        path = self._path(self.tournament_dir, tournament_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise PersistenceException(f"Could not delete {path}: {e}") from e
        logger.info(f"Deleted tournament {tournament_id}")

    # ========== People ==========

    def save_person(self, person_id: str, data: Record) -> None:
        self._write(self._path(self.people_dir, person_id), data)

    def load_person(self, person_id: str) -> Optional[Record]:
        return self._read(self._path(self.people_dir, person_id))

    def load_people(self) -> List[Record]:
        return self._read_all(self.people_dir)
