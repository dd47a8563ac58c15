"""Custom phrase entries, their dictionary and the dynamic phrase evaluator.

A custom phrase file holds lines of the form ``key,order=value``. A negative
order marks a disabled phrase. A value left empty starts a multi-line value
that lasts until the next phrase line. A value that starts with ``#`` is
dynamic: ``$name`` and ``${name}`` are replaced by an evaluator.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, Optional, TextIO

_INT32_MAX = 2**31 - 1
_QUOTE_TRIGGERS = frozenset('\f\r\t\v "')


def _is_alpha(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def escape_for_value(value: str) -> str:
    """Escape a value for storage, quoting it when it holds blanks or quotes."""
    need_quote = any(c in _QUOTE_TRIGGERS for c in value)
    body = (
        value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')
    )
    return f'"{body}"' if need_quote else body


def unescape_for_value(value: str) -> str:
    """Undo :func:`escape_for_value`; raise ValueError on a bad escape."""
    quoted = len(value) >= 2 and value.startswith('"') and value.endswith('"')
    if quoted:
        value = value[1:-1]
    out = []
    escaping = False
    for c in value:
        if not escaping:
            if c == "\\":
                escaping = True
            else:
                out.append(c)
            continue
        if c == "\\":
            out.append("\\")
        elif c == "n":
            out.append("\n")
        elif c == '"' and quoted:
            out.append('"')
        else:
            raise ValueError(f"invalid escape sequence \\{c} in {value!r}")
        escaping = False
    if escaping:
        raise ValueError(f"dangling escape at end of {value!r}")
    return "".join(out)


def parse_custom_phrase_line(line: str) -> Optional[tuple[str, int, str]]:
    """Split a ``key,order=value`` line, or return None if it is not one."""
    i = 0
    size = len(line)
    while i < size and _is_alpha(line[i]):
        i += 1
    if i == 0:
        return None
    key = line[:i]
    if i >= size or line[i] != ",":
        return None
    i += 1
    sign = 1
    if i < size and line[i] == "-":
        sign = -1
        i += 1
    order_start = i
    while i < size and _is_digit(line[i]):
        i += 1
    if i == order_start or i >= size or line[i] != "=":
        return None
    order = int(line[order_start:i])
    if order > _INT32_MAX or order == 0:
        return None
    return key, order * sign, line[i + 1 :]


def _is_comment(line: str) -> bool:
    return line.startswith((";", "#"))


@dataclass
class CustomPhrase:
    """One phrase with its order; a negative order means disabled."""

    order: int
    value: str

    def is_dynamic(self) -> bool:
        return self.value.startswith("#")

    def evaluate(self, evaluator: Callable[[str], str]) -> str:
        """Expand ``$name`` and ``${name}`` in a dynamic phrase."""
        if not self.is_dynamic():
            return self.value
        content = self.value[1:]
        output: list[str] = []
        state = _State.NORMAL
        name_start = 0
        i = 0
        while i < len(content):
            c = content[i]
            if state is _State.NORMAL:
                if c == "$":
                    state = _State.VARIABLE_START
                else:
                    output.append(c)
                i += 1
            elif state is _State.VARIABLE_START:
                if c == "{":
                    name_start = i + 1
                    state = _State.BRACED
                elif c == "$":
                    output.append("$")
                    state = _State.NORMAL
                elif _is_alpha(c) or c == "_":
                    name_start = i
                    state = _State.VARIABLE
                else:
                    output.append("$" + c)
                    state = _State.NORMAL
                i += 1
            elif state is _State.BRACED:
                if c == "}":
                    output.append(evaluator(content[name_start:i]))
                    state = _State.NORMAL
                i += 1
            else:
                if _is_alpha(c) or _is_digit(c) or c == "_":
                    i += 1
                else:
                    output.append(evaluator(content[name_start:i]))
                    state = _State.NORMAL

        if state is _State.VARIABLE_START:
            output.append("$")
        elif state is _State.BRACED:
            output.append("${" + content[name_start:])
        elif state is _State.VARIABLE:
            output.append(evaluator(content[name_start:]))
        return "".join(output)


class _State(enum.Enum):
    NORMAL = enum.auto()
    VARIABLE_START = enum.auto()
    BRACED = enum.auto()
    VARIABLE = enum.auto()


def normalize_data(data: list[CustomPhrase]) -> None:
    """Sort phrases by order and make the enabled orders strictly increasing."""
    if not data:
        return
    data.sort(key=lambda phrase: phrase.order)
    current = data[0].order
    for phrase in data[1:]:
        if current > 0 and phrase.order <= current:
            phrase.order = current + 1
        current = phrase.order


_YEAR_DIGITS = "〇一二三四五六七八九"
_WEEKDAYS = ("日", "一", "二", "三", "四", "五", "六")
_NUMBER_DIGITS = ("零", "一", "二", "三", "四", "五", "六", "七", "八", "九", "十")


def to_chinese_year(num: str) -> str:
    """Spell every digit of ``num`` as a Chinese numeral."""
    if not all(_is_digit(c) for c in num):
        raise ValueError(f"not a digit string: {num!r}")
    return "".join(_YEAR_DIGITS[ord(c) - ord("0")] for c in num)


def to_chinese_weekday(num: int) -> str:
    """Chinese name of a weekday counted from Sunday as 0."""
    if not 0 <= num < 7:
        raise ValueError(f"weekday out of range: {num}")
    return _WEEKDAYS[num]


def to_chinese_two_digit_number(num: int, leading_zero: bool) -> str:
    """Chinese reading of a number between 0 and 99."""
    if not 0 <= num < 100:
        raise ValueError(f"number out of range: {num}")
    if num == 0:
        return _NUMBER_DIGITS[0]
    tens, ones = divmod(num, 10)
    if tens == 0:
        prefix = _NUMBER_DIGITS[0] if leading_zero else ""
    elif tens == 1:
        prefix = _NUMBER_DIGITS[10]
    else:
        prefix = _NUMBER_DIGITS[tens] + _NUMBER_DIGITS[10]
    suffix = _NUMBER_DIGITS[ones] if ones else ""
    return prefix + suffix


def builtin_evaluator(key: str, now: Optional[datetime] = None) -> str:
    """Value of a built-in date or time variable; empty for unknown names."""
    if now is None:
        now = datetime.now()
    year = now.year
    weekday = (now.weekday() + 1) % 7
    half_hour = now.hour % 12 or 12
    table: dict[str, Callable[[], str]] = {
        "year": lambda: str(year),
        "year_yy": lambda: f"{year % 100:02d}",
        "month": lambda: str(now.month),
        "month_mm": lambda: f"{now.month:02d}",
        "day": lambda: str(now.day),
        "day_dd": lambda: f"{now.day:02d}",
        "weekday": lambda: str(weekday),
        "fullhour": lambda: f"{now.hour:02d}",
        "halfhour": lambda: f"{half_hour:02d}",
        "ampm": lambda: "AM" if now.hour < 12 else "PM",
        "minute": lambda: f"{now.minute:02d}",
        "second": lambda: f"{now.second:02d}",
        "year_cn": lambda: to_chinese_year(str(year)),
        "year_yy_cn": lambda: to_chinese_year(f"{year % 100:02d}"),
        "month_cn": lambda: to_chinese_two_digit_number(now.month, False),
        "day_cn": lambda: to_chinese_two_digit_number(now.day, False),
        "weekday_cn": lambda: to_chinese_weekday(weekday),
        "fullhour_cn": lambda: to_chinese_two_digit_number(now.hour, False),
        "halfhour_cn": lambda: to_chinese_two_digit_number(half_hour, False),
        "ampm_cn": lambda: "上午" if now.hour < 12 else "下午",
        "minute_cn": lambda: to_chinese_two_digit_number(now.minute, True),
        "second_cn": lambda: to_chinese_two_digit_number(now.second, True),
    }
    produce = table.get(key)
    return produce() if produce else ""


def _read_lines(stream: TextIO) -> list[str]:
    lines = stream.read().split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class CustomPhraseDict:
    """Phrases grouped by key."""

    def __init__(self) -> None:
        self._data: dict[str, list[CustomPhrase]] = {}

    def load(self, stream: TextIO, load_disabled: bool = False) -> None:
        """Replace the content with the phrases read from ``stream``."""
        self.clear()
        multiline: Optional[CustomPhrase] = None
        skipping = False  # inside a disabled multi-line value being dropped
        parts: list[str] = []

        def finish_multiline() -> None:
            nonlocal multiline, skipping
            if multiline is not None:
                multiline.value = "\n".join(parts)
            multiline = None
            skipping = False
            parts.clear()

        for line in _read_lines(stream):
            in_multiline = multiline is not None or skipping
            if not in_multiline and _is_comment(line):
                continue
            parsed = parse_custom_phrase_line(line)
            if parsed is None:
                if multiline is not None:
                    parts.append(line)
                continue
            finish_multiline()
            key, order, data = parsed
            value = data
            if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                try:
                    value = unescape_for_value(value)
                except ValueError:
                    pass
            if not load_disabled and order < 0:
                if not data:
                    skipping = True
                continue
            phrase = CustomPhrase(order, value)
            self._data.setdefault(key, []).append(phrase)
            if not data:
                multiline = phrase
        finish_multiline()
        for entry in self._data.values():
            normalize_data(entry)

    def save(self, stream: TextIO) -> None:
        """Write every phrase as a ``key,order=value`` line."""
        for key, phrases in self.items():
            for phrase in phrases:
                escaped = escape_for_value(phrase.value)
                if len(escaped) != len(phrase.value):
                    if not escaped.startswith('"'):
                        escaped = '"' + escaped
                    if not escaped.endswith('"'):
                        escaped += '"'
                    text = escaped
                else:
                    text = phrase.value
                stream.write(f"{key},{phrase.order}={text}\n")

    def clear(self) -> None:
        self._data.clear()

    def lookup(self, key: str) -> Optional[list[CustomPhrase]]:
        """Phrases stored under ``key``, or None when the key is unknown."""
        entry = self._data.get(key)
        return None if entry is None else list(entry)

    def add_phrase(self, key: str, value: str, order: int) -> None:
        """Append a phrase; an order of zero is ignored."""
        if order == 0:
            return
        self._data.setdefault(key, []).append(CustomPhrase(order, value))

    def pin_phrase(self, key: str, value: str) -> None:
        """Put ``value`` first under ``key``, shifting the others down."""
        self.remove_phrase(key, value)
        entry = self._data.setdefault(key, [])
        entry.insert(0, CustomPhrase(1, value))
        normalize_data(entry)

    def remove_phrase(self, key: str, value: str) -> None:
        entry = self._data.get(key)
        if entry is None:
            return
        entry[:] = [phrase for phrase in entry if phrase.value != value]

    def items(self) -> Iterator[tuple[str, list[CustomPhrase]]]:
        """Yield each key with its phrases, keys in sorted order."""
        for key in sorted(self._data):
            yield key, self._data[key]