"""ANSI color codes for terminal output.

All colors use the 256-color palette.

Usage:
    from templet.logging.colors import GREEN, RED, RESET

    print(f"{GREEN}Rendered{RESET}")
"""

RESET = "\033[0m"

# Status colors
GREEN = "\033[38;5;82m"  # Success
RED = "\033[38;5;196m"  # Failure
YELLOW = "\033[38;5;226m"  # Warnings

# Information colors
LIGHT_BLUE = "\033[38;5;153m"  # Debug / context
CYAN = "\033[38;5;51m"  # Info
MAGENTA = "\033[38;5;201m"  # Engine component

__all__ = [
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
