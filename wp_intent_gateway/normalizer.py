"""
Short-circuit literal commands.

"test" and "echo" answer immediately so connectivity can be checked
without credentials or a generative-model call.
"""

from typing import Optional

_COMMANDS = ("test", "echo")

ECHO_PREFIX = "Test réussi! Echo: "


def short_circuit(text: str) -> Optional[str]:
    """Return the immediate reply for a literal command, or None."""
    if not text:
        return None
    lowered = text.strip().lower()
    for command in _COMMANDS:
        if lowered == command or lowered.startswith(command + " "):
            return f"{ECHO_PREFIX}{text}"
    return None
