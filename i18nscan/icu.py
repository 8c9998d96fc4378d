"""Lightweight structural validation of ICU-style message templates.

Only the ``{variable, type, cases...}`` skeleton is checked: argument names,
argument types and the case list of plural/selectordinal expressions. Quoted
or escaped braces are not understood.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

ICU_TYPES = ("plural", "select", "selectordinal", "number", "date", "time")
PLURAL_TYPES = ("plural", "selectordinal")
PLURAL_CASES = ("zero", "one", "two", "few", "many", "other", "=0", "=1")

_CASE_TYPES = ("plural", "select", "selectordinal")


@dataclass(frozen=True)
class MessageSyntaxError:
    """A structural problem found in a message template."""

    message: str
    offset: int


def validate_message(text: str) -> List[MessageSyntaxError]:
    """Return the syntax errors found in ``text`` (empty when it looks valid)."""
    errors: List[MessageSyntaxError] = []
    _validate(text, 0, errors)
    return errors


def _validate(text: str, base: int, errors: List[MessageSyntaxError]) -> None:
    for start, end in _top_level_spans(text, base, errors):
        _check_argument(text[start + 1 : end], base + start, errors)


def _top_level_spans(
    text: str, base: int, errors: List[MessageSyntaxError]
) -> Iterator[Tuple[int, int]]:
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}":
            if depth == 0:
                errors.append(MessageSyntaxError("Unexpected '}' without matching '{'", base + index))
                continue
            depth -= 1
            if depth == 0:
                yield start, index
    if depth > 0:
        errors.append(
            MessageSyntaxError(f"Unclosed ICU expression starting at offset {base + start}", base + start)
        )


def _check_argument(inner: str, offset: int, errors: List[MessageSyntaxError]) -> None:
    segments = inner.split(",", 2)
    variable = segments[0].strip()
    if not variable:
        errors.append(MessageSyntaxError(f"Missing variable name in ICU expression: {{{inner}}}", offset))
        return
    if len(segments) < 2:
        return

    arg_type = segments[1].strip()
    if arg_type not in ICU_TYPES:
        errors.append(MessageSyntaxError(f"Invalid ICU type '{arg_type}' in expression: {{{inner}}}", offset))
        return
    if arg_type not in _CASE_TYPES:
        return

    cases_text = segments[2] if len(segments) > 2 else ""
    cases_base = offset + 1 + len(segments[0]) + 1 + len(segments[1]) + 1
    selectors: List[str] = []
    for selector, body, body_offset in _iter_cases(cases_text, cases_base, errors):
        selectors.append(selector)
        _validate(body, body_offset, errors)

    if arg_type in PLURAL_TYPES:
        label = f"{{{variable}, {arg_type}, ...}}"
        # The keyword only has to appear somewhere in the case list.
        if "other" not in cases_text:
            errors.append(MessageSyntaxError(f"Missing required 'other' case in plural expression: {label}", offset))
        if not any(selector in PLURAL_CASES for selector in selectors):
            errors.append(MessageSyntaxError(f"No valid plural cases found in expression: {label}", offset))


def _iter_cases(
    text: str, base: int, errors: List[MessageSyntaxError]
) -> Iterator[Tuple[str, str, int]]:
    index = 0
    length = len(text)
    while index < length:
        while index < length and text[index].isspace():
            index += 1
        if index >= length:
            return
        start = index
        while index < length and not text[index].isspace() and text[index] != "{":
            index += 1
        selector = text[start:index]
        if selector.startswith("offset:"):
            if selector == "offset:":
                while index < length and text[index].isspace():
                    index += 1
                while index < length and not text[index].isspace() and text[index] != "{":
                    index += 1
            continue
        while index < length and text[index].isspace():
            index += 1
        if index >= length or text[index] != "{":
            errors.append(MessageSyntaxError(f"Case '{selector}' has no message body", base + start))
            continue
        body_start = index
        depth = 0
        while index < length:
            if text[index] == "{":
                depth += 1
            elif text[index] == "}":
                depth -= 1
                if depth == 0:
                    break
            index += 1
        yield selector, text[body_start + 1 : index], base + body_start + 1
        index += 1


__all__ = ["ICU_TYPES", "PLURAL_CASES", "MessageSyntaxError", "validate_message"]
