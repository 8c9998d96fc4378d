"""Tests for i18nscan.keygen."""

from __future__ import annotations

import pytest

from i18nscan.keygen import (
    FILE_PATH_SLUG,
    HASH,
    NAMESPACE_SLUG,
    base36,
    generate_key,
    slugify,
    string_hash,
)


def test_string_hash_matches_classic_accumulator() -> None:
    assert string_hash("") == 0
    assert string_hash("a") == 97
    assert string_hash("hello") == 99162322
    # Overflows wrap to signed 32-bit.
    assert string_hash("polygenelubricants") == -2147483648


def test_base36_renders_lowercase_digits() -> None:
    assert base36(0) == "0"
    assert base36(35) == "z"
    assert base36(36) == "10"
    assert base36(-71) == "-1z"


def test_slugify_collapses_non_alphanumeric_runs() -> None:
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  Save & Continue  ", "_") == "save_continue"
    assert slugify("Crème brûlée") == "cr-me-br-l-e"


def test_file_path_slug_uses_file_stem() -> None:
    key = generate_key("Hello there", "src/components/Header.tsx", FILE_PATH_SLUG, 60)
    assert key == "Header.hello-there"


def test_namespace_slug_uses_directories_without_src() -> None:
    key = generate_key("Hello there", "src/features/auth/LoginForm.tsx", NAMESPACE_SLUG, 60)
    assert key == "features.auth.hello-there"


def test_namespace_slug_without_directories_is_plain_slug() -> None:
    assert generate_key("Hello there", "App.tsx", NAMESPACE_SLUG, 60) == "hello-there"


def test_hash_strategy_uses_prefix_and_base36() -> None:
    expected = "msg_" + base36(abs(string_hash("Hello there")))
    assert generate_key("Hello there", "src/App.tsx", HASH, 60, hash_prefix="msg_") == expected


def test_empty_slug_falls_back_to_hash() -> None:
    key = generate_key("!!!", "src/App.tsx", FILE_PATH_SLUG, 60)
    assert key == "App.key_" + base36(abs(string_hash("!!!")))


def test_separator_is_configurable() -> None:
    key = generate_key("Sign in now", "src/App.tsx", FILE_PATH_SLUG, 60, separator=".")
    assert key == "App.sign.in.now"


@pytest.mark.parametrize("max_len", [1, 5, 12, 60])
@pytest.mark.parametrize("strategy", [FILE_PATH_SLUG, NAMESPACE_SLUG, HASH])
def test_generated_keys_respect_max_length(strategy: str, max_len: int) -> None:
    text = "A fairly long sentence that should certainly be truncated somewhere"
    key = generate_key(text, "src/pages/settings/Profile.tsx", strategy, max_len)
    assert len(key) <= max_len


def test_truncation_happens_after_concatenation() -> None:
    key = generate_key("Hello there", "src/Header.tsx", FILE_PATH_SLUG, 10)
    assert key == "Header.hel"


def test_generation_is_deterministic() -> None:
    first = generate_key("Welcome back", "src/App.tsx", HASH, 60)
    second = generate_key("Welcome back", "src/App.tsx", HASH, 60)
    assert first == second
