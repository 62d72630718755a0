"""Filename sanitizing shared by the move and rename engines."""

import re
from typing import Optional

# Characters not allowed in filenames on at least one supported platform
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

# Control characters except tab, newline and carriage return
CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

RESERVED_NAMES = frozenset(
    ['CON', 'PRN', 'AUX', 'NUL']
    + [f'COM{i}' for i in range(1, 10)]
    + [f'LPT{i}' for i in range(1, 10)]
)

MAX_FILENAME_LENGTH = 250
DEFAULT_FILENAME = "unnamed"


def get_base_name(filename: str) -> str:
    """Return the name without its extension.

    Dotfiles such as ``.gitignore`` have no extension.
    """
    last_dot = filename.rfind('.')
    if last_dot <= 0:
        return filename
    return filename[:last_dot]


def get_extension(filename: str) -> str:
    """Return the extension without the dot, or an empty string."""
    last_dot = filename.rfind('.')
    if last_dot <= 0:
        return ''
    return filename[last_dot + 1:]


def split_name(filename: str) -> tuple[str, str]:
    """Split into base name and dotted suffix (``"a.txt"`` -> ``("a", ".txt")``)."""
    ext = get_extension(filename)
    return get_base_name(filename), f".{ext}" if ext else ''


def sanitize_filename(filename: Optional[str]) -> str:
    """Make a filename safe to create on any supported filesystem.

    Invalid characters become underscores, surrounding spaces and dots are
    trimmed (a dotfile keeps its single leading dot), Windows device names
    are prefixed with ``_`` and the length is clamped.
    """
    if not filename:
        return DEFAULT_FILENAME

    sanitized = INVALID_FILENAME_CHARS.sub('_', filename)
    sanitized = sanitized.strip().rstrip('.').rstrip()

    stripped = sanitized.lstrip('.')
    if stripped and len(sanitized) - len(stripped) == 1:
        sanitized = '.' + stripped
    else:
        sanitized = stripped.lstrip()

    if not sanitized:
        return DEFAULT_FILENAME

    if len(sanitized) > MAX_FILENAME_LENGTH:
        ext = get_extension(sanitized)
        if ext and len(ext) < MAX_FILENAME_LENGTH // 2:
            base = get_base_name(sanitized)
            sanitized = base[:245 - len(ext)] + '.' + ext
        else:
            sanitized = sanitized[:MAX_FILENAME_LENGTH]

    # Checked after clamping, which can shorten the base name
    if get_base_name(sanitized).upper() in RESERVED_NAMES:
        sanitized = ('_' + sanitized)[:MAX_FILENAME_LENGTH]

    return sanitized


def sanitize_text(text: Optional[str]) -> str:
    """Clean short user text such as a rename prefix or suffix."""
    if not text:
        return ''
    cleaned = text.strip().replace('<', '').replace('>', '')
    cleaned = CONTROL_CHARS.sub('', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()
