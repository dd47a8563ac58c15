"""Editable table of custom phrases backed by a custom phrase file."""

from __future__ import annotations

import enum
import io
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .customphrase import CustomPhraseDict

CUSTOM_PHRASE_FILE_NAME = "pinyin/customphrase"

_MULTILINE_COMMENT = """\
The line should be in format key,order=value
If value is multiline, you may either write is as
key,order=
line1
line2
...
lineN
Or, write it as key,order="line1\\nline2...\\nlineN"
The comment line is started with # or ;.
"""

_USAGE_COMMENT = """\
If you want to produce dynamic content, you may set the phrase to
start with symbol "#". The phrase may contain variable name like
$name or ${name}. For example, you can write: sj,2=#$fullhour:$minute
to produce current 24-hour time with sj.
Built-in functions include:
$year Current year, e.g. 1990, 2003.
$year_yy Current year in two-digit, e.g. 90, 03.
$month Current month, e.g. 1, 2, 3..., 12.
$month_mm Current month in two digit, e.g. 01, 02, ... 12.
$day Current day of month, e.g. 1, 2, 3..., 31.
$day_dd Current day of month in two digit, e.g. 01, 02, ... 31.
$weekday Current weekday, e.g. 1, 2, 3, ... 7.
$fullhour Current 24-hour, e.g. 00, 01, 02, ..., 23.
$halfhour Current 12-hour, 01, 02, 03, ..., 12.
$ampm Current AM or PM.
$minute Current minute, e.g. 00, 01, ..., 59
$second Current second, e.g. 00, 01, ..., 59
$year_cn Current year in Chinese, e.g. 一九九零, 二零零三.
$year_yy_cn Current year in two digit Chinese, e.g. 九零, 零三.
$month_cn Current month in Chinese, e.g. 一月, 二月, ... 十二月.
$day_cn Current day in Chinese, e.g. 一, 二, ... 三十一.
$fullhour_cn Current 24-hour in Chinese, e.g. 零, 一, 二, ... 二十三.
$halfhour_cn Current 12-hour in Chinese, e.g. 一, 二, ... 十二.
$ampm_cn Current AM, PM in Chinese, 上午 or 下午.
$minute_cn Current minute in Chinese, 零, 一, 二, ... 五十九.
$second_cn Current second in Chinese, 零, 一, 二, ... 五十九.

If lua is installed, the function defined in imeapi can be invoked 
with ${lua:function_name}.
"""

PathLike = Union[str, "os.PathLike[str]"]


def custom_phrase_help_message() -> str:
    """The usage text describing dynamic phrases."""
    return _USAGE_COMMENT


@dataclass
class CustomPhraseItem:
    """One row of the editor: order is always positive here."""

    key: str
    value: str
    order: int
    enabled: bool


class Column(enum.IntEnum):
    ENABLE = 0
    KEY = 1
    PHRASE = 2
    ORDER = 3


def parse_file(path: PathLike) -> list[CustomPhraseItem]:
    """Read every phrase, disabled ones included; a missing file gives []."""
    try:
        with open(path, encoding="utf-8") as stream:
            dictionary = CustomPhraseDict()
            dictionary.load(stream, load_disabled=True)
    except FileNotFoundError:
        return []
    return [
        CustomPhraseItem(key, phrase.value, abs(phrase.order), phrase.order >= 0)
        for key, phrases in dictionary.items()
        for phrase in phrases
    ]


def _comment_block(text: str) -> str:
    return "".join(f"# {line}\n" for line in text.split("\n"))


def save_file(path: PathLike, items: Iterable[CustomPhraseItem]) -> None:
    """Write the items with a help header, replacing the file atomically."""
    dictionary = CustomPhraseDict()
    for item in items:
        dictionary.add_phrase(
            item.key, item.value, item.order * (1 if item.enabled else -1)
        )
    buffer = io.StringIO()
    buffer.write(_comment_block(_MULTILINE_COMMENT))
    buffer.write(_comment_block(custom_phrase_help_message()))
    buffer.write("\n")
    dictionary.save(buffer)

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name + ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as out:
            out.write(buffer.getvalue())
        os.replace(temp_name, target)
    except BaseException:
        try:
            os.unlink(temp_name)
        except OSError:
            pass
        raise


_HEADERS = {Column.KEY: "Key", Column.PHRASE: "Phrase", Column.ORDER: "Order"}


class CustomPhraseModel:
    """Rows of custom phrases with change tracking."""

    def __init__(
        self,
        path: PathLike,
        on_need_save_changed: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self.path = path
        self.on_need_save_changed = on_need_save_changed
        self._items: list[CustomPhraseItem] = []
        self._need_save = False

    @property
    def need_save(self) -> bool:
        return self._need_save

    @property
    def items(self) -> list[CustomPhraseItem]:
        return list(self._items)

    def _set_need_save(self, need_save: bool) -> None:
        if self._need_save != need_save:
            self._need_save = need_save
            if self.on_need_save_changed is not None:
                self.on_need_save_changed(need_save)

    def _check_row(self, row: int) -> CustomPhraseItem:
        if not 0 <= row < len(self._items):
            raise IndexError(f"row out of range: {row}")
        return self._items[row]

    def row_count(self) -> int:
        return len(self._items)

    def header_data(self, section: int) -> Optional[str]:
        try:
            return _HEADERS.get(Column(section))
        except ValueError:
            return None

    def data(self, row: int, column: int):
        """Cell content; None for a row or column that does not exist."""
        if not 0 <= row < len(self._items):
            return None
        item = self._items[row]
        if column == Column.ENABLE:
            return item.enabled
        if column == Column.KEY:
            return item.key
        if column == Column.PHRASE:
            return item.value
        if column == Column.ORDER:
            return abs(item.order)
        return None

    def set_data(self, row: int, column: int, value) -> bool:
        """Change one cell; return False for an unknown column."""
        item = self._check_row(row)
        if column == Column.ENABLE:
            item.enabled = bool(value)
        elif column == Column.KEY:
            item.key = str(value)
        elif column == Column.PHRASE:
            item.value = str(value)
        elif column == Column.ORDER:
            item.order = int(value)
        else:
            return False
        self._set_need_save(True)
        return True

    def add_item(self, key: str, value: str, order: int, enabled: bool) -> None:
        self._items.append(CustomPhraseItem(key, value, order, enabled))
        self._set_need_save(True)

    def delete_item(self, row: int) -> None:
        """Remove a row; an out-of-range row is ignored."""
        if not 0 <= row < len(self._items):
            return
        del self._items[row]
        self._set_need_save(True)

    def delete_all_items(self) -> None:
        if self._items:
            self._set_need_save(True)
        self._items.clear()

    def load(self) -> None:
        """Replace the rows with the content of the file."""
        self._set_need_save(False)
        self._items = parse_file(self.path)

    def save(self) -> None:
        """Write the rows to the file and clear the unsaved flag."""
        save_file(self.path, [CustomPhraseItem(**vars(i)) for i in self._items])
        self._set_need_save(False)