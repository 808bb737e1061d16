import re
import unicodedata

_DIGITS = re.compile(r"([0-9]+)")


def fold(text: str) -> str:
    """Case- and accent-insensitive form of `text`."""
    decomposed = unicodedata.normalize("NFKD", str(text))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def natural_key(label: str) -> tuple:
    """Sort key that orders embedded numbers numerically ("9:00" < "10:00")."""
    parts = _DIGITS.split(fold(label))
    return tuple((0, int(p), "") if _DIGITS.fullmatch(p) else (1, 0, p) for p in parts if p != "")
