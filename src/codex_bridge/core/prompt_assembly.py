"""Prompt assembly for Codex invocations.

Codex has no --system-prompt flag, so project context is prepended to the
user prompt inside a system prompt envelope.
"""

SYSTEM_PROMPT_OPEN = "<system_prompt>"
SYSTEM_PROMPT_CLOSE = "</system_prompt>"


def wrap_system_prompt(context: str) -> str:
    return f"{SYSTEM_PROMPT_OPEN}\n{context}\n{SYSTEM_PROMPT_CLOSE}"


def assemble_prompt(prompt: str, context: str | None) -> str:
    """Build the final prompt text.

    Args:
        prompt: The user prompt
        context: Project context text, or None

    Returns:
        The enveloped context, a blank line, then the prompt. The prompt
        unchanged when context is missing or blank.
    """
    if context is None or not context.strip():
        return prompt
    return f"{wrap_system_prompt(context)}\n\n{prompt}"
