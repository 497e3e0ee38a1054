"""
Repair engine - best-effort reconstruction of corrupted conversation files.

Keeps only messages that have a uuid, a timestamp, a type and non-empty
content; everything else is discarded permanently. The rewritten file is NOT
re-classified: a repaired file can still be too large or carry an oversized
message.
"""

from __future__ import annotations

import logging
from pathlib import Path

from conversation_manager.schemas.conversation import MessageRecord, SummaryRecord
from conversation_manager.schemas.operations import RepairResult
from conversation_manager.services.codec import write_conversation_file
from conversation_manager.services.parser import parse_file

__all__ = ['REPAIRED_SUMMARY', 'is_repairable', 'repair_file']

logger = logging.getLogger(__name__)

REPAIRED_SUMMARY = 'Repaired conversation'


def is_repairable(message: MessageRecord) -> bool:
    """A message survives repair only with identity, timestamp, type and content."""
    return bool(
        message.uuid
        and message.timestamp
        and message.type
        and message.body is not None
        and message.body.has_content
    )


def repair_file(file_path: Path, projects_root: Path | None = None) -> RepairResult:
    """
    Validate and, if corrupted, repair a conversation file in place.

    Args:
        file_path: Conversation file to repair
        projects_root: Projects directory (forwarded to the parser)

    Returns:
        RepairResult. Healthy files are left byte-for-byte untouched, as are
        files where no message survives.

    Raises:
        OSError: If reading or rewriting the file fails
    """
    conversation = parse_file(file_path, projects_root)
    if conversation is None:
        return RepairResult(success=False, message='Could not parse conversation file')

    if not conversation.metadata.is_corrupted:
        return RepairResult(success=True, message='File is not corrupted')

    survivors = [message for message in conversation.messages if is_repairable(message)]
    if not survivors:
        return RepairResult(success=False, message='No valid messages found for repair')

    summary = conversation.summary
    if summary is None:
        assert survivors[0].uuid is not None  # is_repairable guarantees this
        summary = SummaryRecord(type='summary', summary=REPAIRED_SUMMARY, leafUuid=survivors[0].uuid)

    write_conversation_file(file_path, summary, survivors)

    dropped = len(conversation.messages) - len(survivors)
    logger.info('Repaired %s: kept %d messages, dropped %d', file_path.name, len(survivors), dropped)

    return RepairResult(
        success=True,
        message=f'Repaired conversation with {len(survivors)} messages',
        messages_kept=len(survivors),
    )
