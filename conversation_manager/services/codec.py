"""
Record codec - one JSONL line <-> one conversation record.

Decoding never raises for bad input: a line that is not JSON, not an object,
or matches neither the summary nor the message shape decodes to None and the
caller skips it. Encoding is lossless for well-formed records.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import pydantic

from conversation_manager.schemas.conversation import (
    ConversationRecordAdapter,
    MessageRecord,
    SummaryRecord,
)

__all__ = [
    'decode_line',
    'decode_lines',
    'encode_record',
    'message_size',
    'write_conversation_file',
]

logger = logging.getLogger(__name__)


def decode_line(line: str) -> SummaryRecord | MessageRecord | None:
    """Decode one JSONL line, or return None if it is blank or unrecognized."""
    line = line.strip()
    if not line:
        return None

    try:
        raw_data = json.loads(line)
    except json.JSONDecodeError as e:
        logger.debug('Skipping malformed line: %s (%s)', line[:100], e)
        return None

    if not isinstance(raw_data, dict):
        logger.debug('Skipping non-object line: %s', line[:100])
        return None

    try:
        return ConversationRecordAdapter.validate_python(raw_data)
    except pydantic.ValidationError:
        # System records, snapshots, and anything else we don't model
        return None


def decode_lines(lines: Iterable[str]) -> Iterator[SummaryRecord | MessageRecord]:
    """Decode every recognizable record from an iterable of lines."""
    for line in lines:
        record = decode_line(line)
        if record is not None:
            yield record


def encode_record(record: SummaryRecord | MessageRecord) -> str:
    """Encode a record as one compact JSON line (no trailing newline)."""
    # Use exclude_unset for round-trip fidelity
    json_data = record.model_dump(exclude_unset=True, mode='json')
    # Use compact separators for consistent, smaller output
    return json.dumps(json_data, separators=(',', ':'), ensure_ascii=False)


def message_size(record: MessageRecord) -> int:
    """Serialized size of a message in characters, as written to disk."""
    return len(encode_record(record))


def write_conversation_file(
    path: Path,
    summary: SummaryRecord,
    messages: Sequence[MessageRecord],
) -> None:
    """Atomically replace a conversation file with a summary line plus messages.

    Content goes to a temporary file in the same directory first, then
    os.replace swaps it in, so readers never see a half-written file.
    """
    lines = [encode_record(summary), *(encode_record(message) for message in messages)]

    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f'.{path.stem}-', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write('\n'.join(lines) + '\n')
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
