"""The list of installed pinyin dictionaries and whether each is enabled.

A dictionary is a ``*.dict`` file in one of the dictionary directories. It
is disabled by a ``<name>.dict.disable`` marker file next to it; markers are
written to the user directory only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

DICT_SUFFIX = ".dict"
DISABLE_SUFFIX = ".disable"

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class _Entry:
    name: str
    enabled: bool


class DictionaryFileList:
    """Dictionaries found in the user directory and the system directories."""

    def __init__(
        self,
        user_directory: PathLike,
        system_directories: Iterable[PathLike] = (),
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.user_directory = Path(user_directory)
        self.system_directories = [Path(d) for d in system_directories]
        self.on_changed = on_changed
        self._entries: list[_Entry] = []
        self.load_file_list()

    def _locate(self, suffix: str) -> set[str]:
        names: set[str] = set()
        for directory in [self.user_directory, *self.system_directories]:
            if not directory.is_dir():
                continue
            for path in directory.iterdir():
                if path.name.endswith(suffix) and not path.is_dir():
                    names.add(path.name)
        return names

    def load_file_list(self) -> None:
        """Scan the directories again and rebuild the list, sorted by name."""
        enabled = {name: True for name in self._locate(DICT_SUFFIX)}
        for marker in self._locate(DICT_SUFFIX + DISABLE_SUFFIX):
            name = marker[: -len(DISABLE_SUFFIX)]
            if name in enabled:
                enabled[name] = False
        self._entries = [_Entry(name, flag) for name, flag in sorted(enabled.items())]

    def _entry(self, row: int) -> _Entry:
        if not 0 <= row < len(self._entries):
            raise IndexError(f"row out of range: {row}")
        return self._entries[row]

    def row_count(self) -> int:
        return len(self._entries)

    def display_name(self, row: int) -> str:
        """File name of the row without its ``.dict`` suffix."""
        name = self._entry(row).name
        return name[: -len(DICT_SUFFIX)] if name.endswith(DICT_SUFFIX) else name

    def file_name(self, row: int) -> str:
        return self._entry(row).name

    def is_enabled(self, row: int) -> bool:
        return self._entry(row).enabled

    def set_enabled(self, row: int, enabled: bool) -> bool:
        """Change the flag of a row; return True only if it changed."""
        if not 0 <= row < len(self._entries):
            return False
        entry = self._entries[row]
        if entry.enabled == bool(enabled):
            return False
        entry.enabled = bool(enabled)
        if self.on_changed is not None:
            self.on_changed()
        return True

    def find_file(self, name: str) -> int:
        """Row of the file called ``name``, or 0 when there is none."""
        for row, entry in enumerate(self._entries):
            if entry.name == name:
                return row
        return 0

    def save(self) -> None:
        """Create or remove the disable markers in the user directory."""
        for entry in self._entries:
            marker = self.user_directory / (entry.name + DISABLE_SUFFIX)
            if entry.enabled:
                marker.unlink(missing_ok=True)
                continue
            try:
                self.user_directory.mkdir(parents=True, exist_ok=True)
                marker.touch()
            except OSError:
                continue