"""Split one chat message into individual transaction candidates."""
import re
from typing import List

# Comma (unless it sits between two digits), standalone "dan", or newline.
SEPARATOR_PATTERN = re.compile(
    r"(?<!\d),|,(?!\d)|\s+dan\s+|\n",
    re.IGNORECASE
)


def split_transactions(raw_message: str) -> List[str]:
    """
    Split a raw message into transaction candidates.
    
    Args:
        raw_message: Message text without the command prefix,
            e.g. "makan bakso 20rb dan parkir 2rb"
            
    Returns:
        Trimmed, non-empty candidates in order of appearance.
        Empty list if the message holds no text at all.
    """
    if not raw_message:
        return []
    
    segments = SEPARATOR_PATTERN.split(raw_message)
    return [segment.strip() for segment in segments if segment and segment.strip()]
