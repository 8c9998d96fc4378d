"""Tests for i18nscan.icu."""

from __future__ import annotations

import pytest

from i18nscan.icu import validate_message


@pytest.mark.parametrize(
    "message",
    [
        "Plain text",
        "Hello {name}",
        "{count, plural, one {1 item} other {# items}}",
        "{count, plural, =0 {none} one {one} other {#}}",
        "{gender, select, male {He} female {She} other {They}}",
        "{n, selectordinal, one {#st} two {#nd} few {#rd} other {#th}}",
        "{count, number}",
        "{when, date, short}",
        "{count, plural, offset:1 one {you} other {you and # others}}",
        "{count, plural, offset: 1 one {you} other {# others}}",
    ],
)
def test_valid_messages_have_no_errors(message: str) -> None:
    assert validate_message(message) == []


def test_plural_without_other_yields_exactly_one_error() -> None:
    errors = validate_message("{count, plural, one {1 item}}")
    assert len(errors) == 1
    assert "'other'" in errors[0].message


def test_plural_without_any_known_case() -> None:
    errors = validate_message("{count, plural, lots {x} some {y}}")
    messages = [error.message for error in errors]
    assert len(errors) == 2
    assert any("'other'" in message for message in messages)
    assert any("No valid plural cases" in message for message in messages)


def test_unknown_type_is_reported() -> None:
    errors = validate_message("{count, plurall, one {x} other {y}}")
    assert len(errors) == 1
    assert "Invalid ICU type 'plurall'" in errors[0].message


def test_missing_variable_is_reported() -> None:
    errors = validate_message("{, plural, other {x}}")
    assert len(errors) == 1
    assert "Missing variable name" in errors[0].message


def test_select_does_not_require_other() -> None:
    assert validate_message("{kind, select, a {A} b {B}}") == []


def test_nested_plural_inside_select_is_checked() -> None:
    errors = validate_message("{kind, select, a {{n, plural, one {1}}} other {x}}")
    assert len(errors) == 1
    assert "'other'" in errors[0].message


def test_inner_braces_do_not_end_the_expression_early() -> None:
    message = "{count, plural, one {{name} has one} other {{name} has #}}"
    assert validate_message(message) == []


def test_unclosed_expression() -> None:
    errors = validate_message("Hello {name")
    assert len(errors) == 1
    assert "Unclosed" in errors[0].message
    assert errors[0].offset == 6


def test_stray_closing_brace() -> None:
    errors = validate_message("Hello name}")
    assert len(errors) == 1
    assert "Unexpected '}'" in errors[0].message


def test_other_keyword_anywhere_in_plural_cases_satisfies_the_check() -> None:
    assert validate_message("{count, plural, one {# other item}}") == []
