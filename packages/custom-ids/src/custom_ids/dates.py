"""Date pattern rendering and exact parsing.

Stored formats use pattern letters (``yyyyMMdd``, ``HH:mm:ss``, ``dd-MMM-yy``)
rather than ``strftime`` directives. Letters are always rendered with the
invariant (English) month and day names, independent of the process locale.

Supported letters:
    y  year (y = 1-2 digits, yy = 2 digits, yyyy = 4 digits)
    M  month (M, MM, MMM abbreviated name, MMMM full name)
    d  day (d, dd, ddd abbreviated weekday, dddd full weekday)
    H  hour 0-23, h hour 1-12
    m  minute, s second
    f  fraction of a second (up to 7 digits)
    t  AM/PM designator (t = A/P)

Text in single or double quotes and characters escaped with a backslash are
copied verbatim. A ``%`` prefix is ignored.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
MONTH_ABBREVIATIONS = tuple(name[:3] for name in MONTH_NAMES)

# Indexed by datetime.weekday()
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DAY_ABBREVIATIONS = tuple(name[:3] for name in DAY_NAMES)

PATTERN_LETTERS = frozenset("yMdHhmsft")
MAX_FRACTION_DIGITS = 7
TWO_DIGIT_YEAR_MAX = 2049


@dataclass(frozen=True)
class Token:
    """A run of one pattern letter, or literal text (letter is empty)."""

    letter: str
    text: str

    @property
    def width(self) -> int:
        return len(self.text)


def tokenize(pattern: str) -> list[Token]:
    """Split a date pattern into letter runs and literal text."""
    tokens: list[Token] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            tokens.append(Token("", "".join(literal)))
            literal.clear()

    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch in ("'", '"'):
            end = pattern.find(ch, i + 1)
            if end == -1:
                end = len(pattern)
            literal.append(pattern[i + 1 : end])
            i = end + 1
        elif ch == "\\":
            literal.append(pattern[i + 1 : i + 2])
            i += 2
        elif ch == "%":
            i += 1
        elif ch in PATTERN_LETTERS:
            j = i
            while j < len(pattern) and pattern[j] == ch:
                j += 1
            flush()
            tokens.append(Token(ch, pattern[i:j]))
            i = j
        else:
            literal.append(ch)
            i += 1

    flush()
    return tokens


def _render_token(token: Token, moment: datetime) -> str:
    letter, width = token.letter, token.width

    if letter == "y":
        if width == 1:
            return str(moment.year % 100)
        if width == 2:
            return f"{moment.year % 100:02d}"
        return str(moment.year).zfill(width)
    if letter == "M":
        if width >= 4:
            return MONTH_NAMES[moment.month - 1]
        if width == 3:
            return MONTH_ABBREVIATIONS[moment.month - 1]
        return str(moment.month).zfill(width)
    if letter == "d":
        if width >= 4:
            return DAY_NAMES[moment.weekday()]
        if width == 3:
            return DAY_ABBREVIATIONS[moment.weekday()]
        return str(moment.day).zfill(width)
    if letter == "H":
        return str(moment.hour).zfill(min(width, 2))
    if letter == "h":
        return str(moment.hour % 12 or 12).zfill(min(width, 2))
    if letter == "m":
        return str(moment.minute).zfill(min(width, 2))
    if letter == "s":
        return str(moment.second).zfill(min(width, 2))
    if letter == "f":
        # datetime carries microseconds, the seventh digit is always zero
        return f"{moment.microsecond:06d}0"[: min(width, MAX_FRACTION_DIGITS)]
    if letter == "t":
        designator = "AM" if moment.hour < 12 else "PM"
        return designator[:1] if width == 1 else designator
    return token.text


def render(pattern: str, moment: datetime) -> str:
    """Render ``moment`` using a date pattern.

    Example:
        >>> render("yyyy-MM-dd", datetime(2025, 9, 5))
        '2025-09-05'
    """
    return "".join(
        _render_token(token, moment) if token.letter else token.text
        for token in tokenize(pattern)
    )


def _token_regex(token: Token) -> str:
    letter, width = token.letter, token.width

    if not letter:
        return re.escape(token.text)
    if letter == "y":
        if width == 1:
            return "([0-9]{1,2})"
        if width == 2:
            return "([0-9]{2})"
        # Years are padded to the width, never truncated
        return f"([0-9]{{{width},}})"
    if letter == "M" and width >= 4:
        return f"({'|'.join(MONTH_NAMES)})"
    if letter == "M" and width == 3:
        return f"({'|'.join(MONTH_ABBREVIATIONS)})"
    if letter == "d" and width >= 4:
        return f"({'|'.join(DAY_NAMES)})"
    if letter == "d" and width == 3:
        return f"({'|'.join(DAY_ABBREVIATIONS)})"
    if letter == "f":
        return f"([0-9]{{{min(width, MAX_FRACTION_DIGITS)}}})"
    if letter == "t":
        return "([AP])" if width == 1 else "(AM|PM)"
    # M, d, H, h, m, s
    return "([0-9]{1,2})" if width == 1 else "([0-9]{2})"


@lru_cache(maxsize=128)
def _compile(pattern: str) -> tuple[re.Pattern[str], tuple[Token, ...]]:
    tokens = tuple(tokenize(pattern))
    regex = re.compile("".join(_token_regex(token) for token in tokens))
    return regex, tuple(token for token in tokens if token.letter)


def parse_exact(text: str, pattern: str) -> datetime | None:
    """Parse ``text`` that must match ``pattern`` exactly.

    Returns:
        Parsed datetime, or None when the text does not match the pattern or
        names an impossible date (e.g. February 30th)
    """
    regex, letter_tokens = _compile(pattern)
    match = regex.fullmatch(text)
    if match is None:
        return None

    parts = {"year": 1, "month": 1, "day": 1, "hour": 0, "minute": 0, "second": 0}
    microsecond = 0
    hour12: int | None = None
    is_pm: bool | None = None

    for token, value in zip(letter_tokens, match.groups()):
        letter, width = token.letter, token.width
        if letter == "y":
            year = int(value)
            if width <= 2:
                year += 2000 if year <= TWO_DIGIT_YEAR_MAX % 100 else 1900
            parts["year"] = year
        elif letter == "M":
            if width >= 4:
                parts["month"] = MONTH_NAMES.index(value) + 1
            elif width == 3:
                parts["month"] = MONTH_ABBREVIATIONS.index(value) + 1
            else:
                parts["month"] = int(value)
        elif letter == "d":
            if width <= 2:
                parts["day"] = int(value)
        elif letter == "H":
            parts["hour"] = int(value)
        elif letter == "h":
            hour12 = int(value)
        elif letter == "m":
            parts["minute"] = int(value)
        elif letter == "s":
            parts["second"] = int(value)
        elif letter == "f":
            microsecond = int(value.ljust(6, "0")[:6])
        elif letter == "t":
            is_pm = value.startswith("P")

    if hour12 is not None:
        if not 1 <= hour12 <= 12:
            return None
        parts["hour"] = hour12 % 12 + (12 if is_pm else 0)

    try:
        return datetime(microsecond=microsecond, **parts)
    except ValueError:
        return None
