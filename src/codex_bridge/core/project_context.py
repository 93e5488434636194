"""Project context loading from AGENTS.md.

The context file is read fresh on every invocation so edits take effect
immediately. Failures never abort the invocation: they degrade to "no
context", with a Diagnostic where the user should be told about it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from codex_bridge.core.types import Diagnostic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectContext:
    """Loaded project context.

    Attributes:
        text: Context text, or None when there is no usable context
        warning: Diagnostic describing a degraded load, if any
        truncated: True if the file exceeded the size cap
    """

    text: str | None
    warning: Diagnostic | None
    truncated: bool


NO_CONTEXT = ProjectContext(text=None, warning=None, truncated=False)


def truncate_utf8(data: bytes, max_bytes: int) -> bytes:
    """Cut data to at most max_bytes without splitting a UTF-8 sequence.

    Backs off over continuation bytes (10xxxxxx) so the cut lands on the
    start of a codepoint.
    """
    if len(data) <= max_bytes:
        return data
    cut = max_bytes
    while cut > 0 and (data[cut] & 0xC0) == 0x80:
        cut -= 1
    return data[:cut]


def load_project_context(
    working_directory: Path,
    *,
    filename: str,
    max_bytes: int,
) -> ProjectContext:
    """Read the project context file from working_directory.

    Args:
        working_directory: Directory whose root holds the context file
        filename: Conventional file name (AGENTS.md by default)
        max_bytes: Maximum number of bytes of context to keep

    Returns:
        ProjectContext; text is None for a missing, empty, unreadable or
        undecodable file.
    """
    path = working_directory / filename
    if not path.is_file():
        return NO_CONTEXT

    try:
        with path.open("rb") as f:
            # One extra byte tells us whether truncation is needed.
            data = f.read(max_bytes + 1)
    except OSError as e:
        message = f"Failed to read {path}: {e}"
        logger.warning(message)
        return ProjectContext(
            text=None,
            warning=Diagnostic(kind="context_load", message=message),
            truncated=False,
        )

    truncated = len(data) > max_bytes
    data = truncate_utf8(data, max_bytes)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        message = f"{path} is not valid UTF-8, ignoring project context: {e}"
        logger.warning(message)
        return ProjectContext(
            text=None,
            warning=Diagnostic(kind="context_load", message=message),
            truncated=False,
        )

    if not text.strip():
        return NO_CONTEXT

    if truncated:
        message = f"{path} exceeds {max_bytes} bytes and was truncated"
        logger.warning(message)
        return ProjectContext(
            text=text,
            warning=Diagnostic(kind="context_load", message=message),
            truncated=True,
        )

    logger.debug("Loaded %d bytes of project context from %s", len(data), path)
    return ProjectContext(text=text, warning=None, truncated=False)
