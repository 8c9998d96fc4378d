"""Deterministic catalog key synthesis."""

from __future__ import annotations

import os
import re
from pathlib import PurePosixPath
from typing import Optional

FILE_PATH_SLUG = "filePathSlug"
NAMESPACE_SLUG = "namespaceSlug"
HASH = "hash"

STRATEGIES = (FILE_PATH_SLUG, NAMESPACE_SLUG, HASH)

_SOURCE_ROOT = "src"
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def string_hash(text: str) -> int:
    """Classic ``h = h * 31 + c`` accumulator over UTF-16 code units, as signed 32-bit."""
    value = 0
    encoded = text.encode("utf-16-le")
    for index in range(0, len(encoded), 2):
        unit = encoded[index] | (encoded[index + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def base36(number: int) -> str:
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def slugify(text: str, separator: str = "-") -> str:
    """Lowercase ``text`` and collapse every non-alphanumeric run into ``separator``."""
    return _NON_ALNUM.sub(separator, text.lower()).strip(separator)


def generate_key(
    text: str,
    file_path: str,
    strategy: str,
    max_len: int,
    *,
    separator: str = "-",
    hash_prefix: str = "key_",
) -> str:
    """Return a candidate catalog key for ``text`` found in ``file_path``.

    The result is truncated to ``max_len`` after the parts are joined, so a key
    may end mid-word.
    """
    if strategy == HASH:
        key = _hash_key(text, hash_prefix)
    else:
        slug = slugify(text, separator) or _hash_key(text, hash_prefix)
        if strategy == NAMESPACE_SLUG:
            namespace = _namespace_for(file_path, separator)
            key = f"{namespace}.{slug}" if namespace else slug
        else:
            key = f"{_stem(file_path)}.{slug}"
    return key[: max(max_len, 0)]


def _hash_key(text: str, prefix: str) -> str:
    return f"{prefix}{base36(abs(string_hash(text)))}"


def _posix(file_path: str) -> PurePosixPath:
    return PurePosixPath(file_path.replace("\\", "/"))


def _stem(file_path: str) -> str:
    name = _posix(file_path).name
    stem, _ = os.path.splitext(name)
    return stem or "unknown"


def _namespace_for(file_path: str, separator: str) -> Optional[str]:
    parts = [part for part in _posix(file_path).parts[:-1] if part not in {"/", ".", ".."}]
    if parts and parts[0] == _SOURCE_ROOT:
        parts = parts[1:]
    segments = [slugify(part, separator) for part in parts]
    segments = [segment for segment in segments if segment]
    return ".".join(segments) if segments else None


__all__ = [
    "FILE_PATH_SLUG",
    "HASH",
    "NAMESPACE_SLUG",
    "STRATEGIES",
    "base36",
    "generate_key",
    "slugify",
    "string_hash",
]
