"""
Conversation parser - JSONL file parsing and metadata derivation.

Turns one conversation file into its messages, optional summary record, and
freshly derived ConversationMetadata. Malformed lines are skipped; a file full
of them still parses (and is then flagged by the corruption classifier).
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from conversation_manager.paths import resolve_project_dir
from conversation_manager.schemas.conversation import MessageRecord, SummaryRecord, TextContent
from conversation_manager.schemas.operations import ConversationFile, ConversationMetadata
from conversation_manager.services.codec import decode_lines
from conversation_manager.services.health import check_corruption
from conversation_manager.services.timestamps import parse_timestamp

__all__ = [
    'CONVERSATION_SUFFIX',
    'NO_SUMMARY',
    'SUMMARY_MAX_LENGTH',
    'generate_auto_summary',
    'parse_file',
    'parse_lines',
]

logger = logging.getLogger(__name__)

CONVERSATION_SUFFIX = '.jsonl'

SUMMARY_MAX_LENGTH = 80
NO_SUMMARY = 'No summary available'

_WHITESPACE = re.compile(r'\s+')


def parse_lines(lines: Sequence[str]) -> tuple[list[MessageRecord], SummaryRecord | None]:
    """
    Split decoded records into messages (file order) and the summary.

    If a file carries more than one summary record, the last one wins.
    """
    messages: list[MessageRecord] = []
    summary: SummaryRecord | None = None

    for record in decode_lines(lines):
        if isinstance(record, SummaryRecord):
            summary = record
        else:
            messages.append(record)

    return messages, summary


def parse_file(file_path: Path, projects_root: Path | None = None) -> ConversationFile | None:
    """
    Parse a conversation file from disk.

    Args:
        file_path: Path to a .jsonl conversation file
        projects_root: Projects directory the file lives under; used to
            locate the encoded project directory

    Returns:
        ConversationFile, or None if the file does not exist

    Raises:
        OSError: If the file exists but cannot be read
    """
    if not file_path.is_file():
        return None

    with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
        lines = f.readlines()

    messages, summary = parse_lines(lines)
    skipped = sum(1 for line in lines if line.strip()) - len(messages) - (1 if summary else 0)
    if skipped > 0:
        logger.debug('Skipped %d unrecognized lines in %s', skipped, file_path.name)

    metadata = _extract_metadata(file_path, projects_root, messages, summary)

    return ConversationFile(
        file_path=str(file_path),
        messages=messages,
        summary=summary,
        metadata=metadata,
    )


def _extract_metadata(
    file_path: Path,
    projects_root: Path | None,
    messages: Sequence[MessageRecord],
    summary: SummaryRecord | None,
) -> ConversationMetadata:
    stats = file_path.stat()
    project_label, working_directory = resolve_project_dir(file_path, projects_root)

    timestamps = sorted(ts for ts in (parse_timestamp(m.timestamp) for m in messages) if ts is not None)
    if timestamps:
        created_at, modified_at = timestamps[0], timestamps[-1]
    else:
        created_at = _birth_time(stats)
        modified_at = datetime.fromtimestamp(stats.st_mtime, tz=UTC)

    verdict = check_corruption(messages, stats.st_size)

    return ConversationMetadata(
        id=file_path.name.removesuffix(CONVERSATION_SUFFIX),
        file_path=str(file_path),
        project_label=project_label,
        working_directory=working_directory,
        summary=summary.summary if summary else generate_auto_summary(messages),
        message_count=len(messages),
        file_size=stats.st_size,
        created_at=created_at,
        modified_at=modified_at,
        is_corrupted=verdict.is_corrupted,
        corruption_reason=verdict.reason,
        git_branch=_git_branch(messages),
    )


def _git_branch(messages: Sequence[MessageRecord]) -> str | None:
    """Branch recorded on the first message; empty or non-string means unset."""
    branch = messages[0].gitBranch if messages else None
    return branch if isinstance(branch, str) and branch else None


def _birth_time(stats: os.stat_result) -> datetime:
    """File creation time; Linux has no st_birthtime, so st_ctime stands in."""
    birth = getattr(stats, 'st_birthtime', None)
    return datetime.fromtimestamp(birth if birth is not None else stats.st_ctime, tz=UTC)


def generate_auto_summary(messages: Sequence[MessageRecord]) -> str:
    """
    Generate a summary from the first user message (mimics Claude Code).

    Prefers the first user message with structured content: its text blocks
    joined by spaces, whitespace collapsed. Falls back to the first user
    message with plain string content. Both are truncated to 80 characters.
    """
    user_contents = [m.body.content for m in messages if m.type == 'user' and m.body is not None]

    for content in user_contents:
        if isinstance(content, list):
            text = ' '.join(block.text for block in content if isinstance(block, TextContent))
            return _truncate(_WHITESPACE.sub(' ', text.strip()))

    for content in user_contents:
        if isinstance(content, str):
            return _truncate(content)

    return NO_SUMMARY


def _truncate(text: str) -> str:
    if len(text) > SUMMARY_MAX_LENGTH:
        return text[: SUMMARY_MAX_LENGTH - 3] + '...'
    return text
