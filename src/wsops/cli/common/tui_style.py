"""prompt_toolkit style for wsops confirmation prompts.

Only destructive workspace actions (rm) prompt the user, so a single style
is shared by every questionary prompt.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_DELETE = Style.from_dict(
    {
        "qmark": "bold ansired",
        "question": "bold",
        "answer": "bold ansired",
        "instruction": "ansibrightblack italic",
        "error": "bold ansired",
    }
)
