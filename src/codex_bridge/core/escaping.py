"""Platform-specific escaping of the prompt argument.

On POSIX the argument vector goes straight to execve, so the prompt is
passed through untouched. On Windows the npm-installed codex is a .cmd
shim that re-parses its command line through cmd.exe, so quotes,
backslashes and control characters are written as backslash escapes that
codex decodes on its side.
"""

import sys

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_UNESCAPES = {"\\": "\\", '"': '"', "'": "'", "n": "\n", "r": "\r", "t": "\t"}


def requires_escaping(platform: str | None = None) -> bool:
    """Whether arguments pass through a shell reinterpretation layer."""
    if platform is None:
        platform = sys.platform
    return platform == "win32"


def escape_prompt(prompt: str, *, platform: str | None = None) -> str:
    """Escape prompt text for the host platform.

    Identity where no escaping is required. Otherwise every occurrence of
    an escapable character is rewritten.
    """
    if not requires_escaping(platform):
        return prompt

    parts: list[str] = []
    for ch in prompt:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(ch)
    return "".join(parts)


def unescape_prompt(text: str, *, platform: str | None = None) -> str:
    """Inverse of escape_prompt, matching how codex decodes its argument.

    Unknown escape sequences are kept verbatim.
    """
    if not requires_escaping(platform):
        return text

    parts: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            parts.append(ch)
            i += 1
            continue

        nxt = text[i + 1]
        if nxt in _UNESCAPES:
            parts.append(_UNESCAPES[nxt])
            i += 2
            continue

        hex_digits = text[i + 2 : i + 6]
        if nxt == "u" and len(hex_digits) == 4 and _is_hex(hex_digits):
            parts.append(chr(int(hex_digits, 16)))
            i += 6
            continue

        parts.append(ch)
        i += 1
    return "".join(parts)


def _is_hex(text: str) -> bool:
    return all(c in "0123456789abcdefABCDEF" for c in text)
