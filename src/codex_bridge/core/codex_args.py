"""Command-line construction for `codex exec`.

The token order is fixed; codex's own argument parser depends on it:

    exec [--cd DIR] --json [--image PATH]... [ADDITIONAL_ARGS]... [resume ID] -- PROMPT
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from codex_bridge.core.errors import InvalidOptionsError
from codex_bridge.core.types import Diagnostic

EXEC_SUBCOMMAND = "exec"
CD_FLAG = "--cd"
JSON_FLAG = "--json"
IMAGE_FLAG = "--image"
RESUME_SUBCOMMAND = "resume"
ARGS_TERMINATOR = "--"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageSelection:
    """Images that passed validation, plus warnings for the dropped ones."""

    valid: tuple[Path, ...]
    warnings: tuple[Diagnostic, ...]


def select_image_paths(images: Sequence[Path], base_dir: Path) -> ImageSelection:
    """Resolve image paths and drop the ones that are not existing files.

    Args:
        images: Image paths in request order
        base_dir: Directory relative paths are resolved against

    Returns:
        ImageSelection with absolute paths in input order.
    """
    valid: list[Path] = []
    warnings: list[Diagnostic] = []
    for image in images:
        path = image if image.is_absolute() else base_dir / image
        if not path.is_file():
            message = f"Image file does not exist or is not a file, skipping: {path}"
            logger.warning(message)
            warnings.append(Diagnostic(kind="image_path", message=message))
            continue
        valid.append(path.resolve())
    return ImageSelection(valid=tuple(valid), warnings=tuple(warnings))


def build_codex_exec_args(
    *,
    prompt: str,
    working_directory: Path | None,
    images: Sequence[Path],
    additional_args: Sequence[str],
    session_id: str | None,
) -> list[str]:
    """Build CLI arguments for codex exec (without the executable).

    Args:
        prompt: The assembled (and escaped) prompt text, always the last token.
        working_directory: Passed via --cd only when explicitly set.
        images: Already-validated image paths.
        additional_args: Configured extra tokens, passed verbatim.
        session_id: Thread id to resume, or None for a new session.

    Returns:
        List of CLI argument strings.

    Raises:
        InvalidOptionsError: If the prompt is empty.
    """
    if not prompt:
        raise InvalidOptionsError("Prompt is empty after assembly")

    args = [EXEC_SUBCOMMAND]
    if working_directory is not None:
        args.extend([CD_FLAG, str(working_directory)])
    args.append(JSON_FLAG)
    for image in images:
        args.extend([IMAGE_FLAG, str(image)])
    args.extend(additional_args)
    if session_id is not None:
        args.extend([RESUME_SUBCOMMAND, session_id])
    args.extend([ARGS_TERMINATOR, prompt])
    return args
