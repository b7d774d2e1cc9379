"""Questionary / prompt_toolkit theme for rdslogs.

The only interactive prompt is the confirmation before an existing log table
is replaced; it uses the destructive (red) palette.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "qmark": "bold ansibrightred",
        "question": "bold ansibrightred",
        "answer": "bold ansibrightred",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)
