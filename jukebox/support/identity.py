from __future__ import annotations

import unicodedata

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def normalize_name(value: str) -> str:
    """NFKC-normalize, lower-case and strip a display name."""
    return unicodedata.normalize("NFKC", value or "").lower().strip()


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def fnv1a64(text: str) -> str:
    """64-bit FNV-1a over the UTF-8 bytes of ``text``, rendered in base 36."""
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK_64
    return _to_base36(value)


def derive_artist_id(artist_name: str) -> str:
    """Stable artist id: the same name always maps to the same id."""
    return f"artist.{fnv1a64(normalize_name(artist_name))}"


__all__ = [
    "normalize_name",
    "fnv1a64",
    "derive_artist_id",
]
