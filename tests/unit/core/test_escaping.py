"""Tests for platform-specific prompt escaping."""

import pytest

from codex_bridge.core.escaping import escape_prompt, requires_escaping, unescape_prompt

WINDOWS = "win32"
POSIX = "linux"


def test_only_windows_requires_escaping() -> None:
    assert requires_escaping(WINDOWS) is True
    assert requires_escaping(POSIX) is False
    assert requires_escaping("darwin") is False


@pytest.mark.parametrize("text", ["", "plain", 'a\\b"c', "line1\nline2\ttab 'single'"])
def test_identity_without_shell_layer(text: str) -> None:
    assert escape_prompt(text, platform=POSIX) == text
    assert unescape_prompt(text, platform=POSIX) == text


def test_escapes_backslash_and_quote() -> None:
    assert escape_prompt('a\\b"c', platform=WINDOWS) == 'a\\\\b\\"c'


def test_empty_string_maps_to_empty() -> None:
    assert escape_prompt("", platform=WINDOWS) == ""


def test_escapes_every_occurrence() -> None:
    escaped = escape_prompt('""\\\\\n\n', platform=WINDOWS)
    assert escaped == '\\"\\"\\\\\\\\\\n\\n'


def test_control_characters_become_unicode_escapes() -> None:
    assert escape_prompt("a\x00b\x1bc\x7f", platform=WINDOWS) == "a\\u0000b\\u001bc\\u007f"


def test_escaped_text_has_no_raw_specials() -> None:
    escaped = escape_prompt("x\ny\tz\r'\"", platform=WINDOWS)
    for ch in ("\n", "\t", "\r"):
        assert ch not in escaped


@pytest.mark.parametrize(
    "text",
    [
        "",
        'a\\b"c',
        "Test with \"quotes\" and \n newlines and \t tabs",
        "it's a 'test'",
        "trailing backslash \\",
        "\\u0041 looks like an escape",
        "ctrl \x01\x02\x7f chars",
        "unicode ünïcödé 🙂",
    ],
)
def test_round_trips_through_unescape(text: str) -> None:
    assert unescape_prompt(escape_prompt(text, platform=WINDOWS), platform=WINDOWS) == text


def test_unknown_escape_is_kept_verbatim() -> None:
    assert unescape_prompt("a\\qb", platform=WINDOWS) == "a\\qb"
