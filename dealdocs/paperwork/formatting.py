"""
Field Formatting

Turns raw resolved values into the display strings written onto
templates and shown in previews.
"""

from typing import Any

# Placeholder for an unknown value; never written to a template
EMPTY_DISPLAY = "---"

# Placeholder for fields the salesperson fills in by hand
MANUAL_ENTRY_DISPLAY = "[Manual Entry]"

# Checkbox values that mean "checked" (compared lowercase)
CHECKED_VALUES = ('yes', 'true', 'on')


def format_display_value(value: Any) -> str:
    """
    Format a resolved value for display.

    Examples:
        None -> "---"
        ""   -> "---"
        0    -> "---"
        True -> "Yes"
        2021 -> "2021"
        []   -> "[]"
    """
    if value is None:
        return EMPTY_DISPLAY

    if isinstance(value, bool):
        return "Yes" if value else "No"

    if isinstance(value, (int, float)) and value == 0:
        return EMPTY_DISPLAY

    if value == '':
        return EMPTY_DISPLAY

    return str(value)


def is_fillable(display_value: str) -> bool:
    """Check whether a formatted value should be written to a template."""
    return display_value not in (EMPTY_DISPLAY, MANUAL_ENTRY_DISPLAY)


def is_checked_value(display_value: str) -> bool:
    """Decide a checkbox state from a formatted value."""
    return display_value.strip().lower() in CHECKED_VALUES
