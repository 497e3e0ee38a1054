"""
Corruption classifier - heuristic health check for one conversation file.

Checks run in a fixed order and the first match wins, so a file that is both
too large and empty reports "File too large". Size checks come first; the
missing-uuid check comes last.
"""

from __future__ import annotations

from collections.abc import Sequence

from conversation_manager.schemas.conversation import MessageRecord
from conversation_manager.schemas.operations import CorruptionVerdict
from conversation_manager.services.codec import message_size
from conversation_manager.services.timestamps import parse_timestamp

__all__ = [
    'MAX_FILE_SIZE',
    'MAX_INVALID_TIMESTAMP_RATIO',
    'MAX_MESSAGE_SIZE',
    'check_corruption',
]

MAX_FILE_SIZE = 5 * 1024 * 1024
MAX_MESSAGE_SIZE = 50 * 1024
MAX_INVALID_TIMESTAMP_RATIO = 0.5

HEALTHY = CorruptionVerdict(is_corrupted=False)


def check_corruption(messages: Sequence[MessageRecord], file_size: int) -> CorruptionVerdict:
    """Classify a parsed file as healthy or corrupted-with-reason."""
    if file_size > MAX_FILE_SIZE:
        return CorruptionVerdict(is_corrupted=True, reason='File too large (>5MB)')

    if any(message_size(message) > MAX_MESSAGE_SIZE for message in messages):
        return CorruptionVerdict(is_corrupted=True, reason='Contains oversized message (>50KB)')

    if not messages:
        return CorruptionVerdict(is_corrupted=True, reason='No valid messages found')

    invalid_timestamps = sum(1 for message in messages if parse_timestamp(message.timestamp) is None)
    if invalid_timestamps > len(messages) * MAX_INVALID_TIMESTAMP_RATIO:
        return CorruptionVerdict(is_corrupted=True, reason='Too many invalid timestamps')

    if any(not message.uuid for message in messages):
        return CorruptionVerdict(is_corrupted=True, reason='Missing message UUIDs')

    return HEALTHY
