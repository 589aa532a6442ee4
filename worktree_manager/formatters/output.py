"""JSON and section formatting utilities."""

import json
from typing import Any, Optional


def format_json(data: Any, pretty: bool = True) -> str:
    """
    Serialize command output as JSON.

    Args:
        data: JSON-serialisable value
        pretty: Indent with two spaces (single line when False)

    Returns:
        JSON text without a trailing newline
    """
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)


def format_section(title: str, body: Optional[str], fallback: str = "(none)") -> str:
    """
    Format a titled, indented preview section.

    Example:
        Status:
          ## main
          M  README.md
    """
    lines = [f"{title}:"]
    body = (body or "").rstrip()
    if not body:
        lines.append(f"  {fallback}")
    else:
        lines.extend(f"  {line}" for line in body.splitlines())
    return "\n".join(lines) + "\n"


def format_dirty(dirty: bool) -> str:
    return " (dirty)" if dirty else ""
