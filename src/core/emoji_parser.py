"""
Event title parsing: split a leading emoji off a title to use as a status icon.

"🏃 Run" becomes icon "🏃" with label "Run". Titles that do not start with a
recognised pictographic character yield None so callers can fall back to a
default icon.
"""

from core.config import PLACEHOLDER_LABEL
from models.events import ParsedStatus

# =============================================================================
# CODE POINT TABLES
# =============================================================================

# Characters that may start (or continue, after a joiner) an icon
ICON_RANGES = (
    (0x1F600, 0x1F64F),  # Emoticons
    (0x1F300, 0x1F5FF),  # Miscellaneous Symbols and Pictographs
    (0x1F680, 0x1F6FF),  # Transport and Map Symbols
    (0x2600, 0x26FF),  # Miscellaneous Symbols
    (0x2700, 0x27BF),  # Dingbats
    (0x1F1E6, 0x1F1FF),  # Regional indicators (flag halves)
    (0x1F900, 0x1F9FF),  # Supplemental Symbols and Pictographs
    (0x1FA70, 0x1FAFF),  # Symbols and Pictographs Extended-A
    (0x1F004, 0x1F0CF),  # Mahjong, domino and playing cards
    (0x1F170, 0x1F251),  # Enclosed Alphanumeric Supplement
)

# At most one of these may follow an icon character
MODIFIER_RANGES = (
    (0x1F3FB, 0x1F3FF),  # Skin tones
    (0xFE0E, 0xFE0F),  # Text / emoji presentation selectors
)

ZERO_WIDTH_JOINER = "\u200d"


def _in_ranges(char: str, ranges: tuple[tuple[int, int], ...]) -> bool:
    code_point = ord(char)
    return any(low <= code_point <= high for low, high in ranges)


def is_icon_char(char: str) -> bool:
    """Check if a single character falls in one of the icon ranges."""
    return _in_ranges(char, ICON_RANGES)


def is_modifier_char(char: str) -> bool:
    """Check if a single character is a skin tone or variation selector."""
    return _in_ranges(char, MODIFIER_RANGES)


def _consume_cluster(text: str, pos: int) -> int:
    """
    Consume one icon cluster starting at pos, which must be an icon character.

    A cluster is an icon character with an optional modifier, followed by any
    number of joiner + icon (+ modifier) continuations, e.g. 👨‍💻 or 🏃🏽‍♂️.

    Returns:
        Index just past the cluster
    """
    pos += 1
    if pos < len(text) and is_modifier_char(text[pos]):
        pos += 1

    while (
        pos + 1 < len(text)
        and text[pos] == ZERO_WIDTH_JOINER
        and is_icon_char(text[pos + 1])
    ):
        pos += 2
        if pos < len(text) and is_modifier_char(text[pos]):
            pos += 1

    return pos


def split_leading_icon(text: str) -> tuple[str, str]:
    """
    Split text into (icon, remaining), consuming leading icon clusters greedily.

    Consecutive clusters are kept together so two regional indicators form one
    flag. icon is empty if text does not start with an icon character.
    """
    pos = 0
    while pos < len(text) and is_icon_char(text[pos]):
        pos = _consume_cluster(text, pos)
    return text[:pos].strip(), text[pos:].strip()


def parse_event_title(title: str | None) -> ParsedStatus | None:
    """
    Parse a calendar event title into a presence icon and label.

    Returns:
        ParsedStatus, or None if the title does not start with an emoji
    """
    if not title:
        return None

    trimmed = title.strip()
    if not trimmed or not is_icon_char(trimmed[0]):
        return None

    icon, remaining = split_leading_icon(trimmed)
    if not icon:
        return None

    return ParsedStatus(icon=icon, label=remaining or PLACEHOLDER_LABEL)
