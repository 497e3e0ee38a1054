"""Record builders shared by the test modules."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

Record = dict[str, Any] | str


def make_message(
    uuid: str | None,
    /,
    *,
    type: str = 'user',
    content: Any = 'hello',
    timestamp: Any = '2025-07-01T09:00:00.000Z',
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw message record. Pass None to omit uuid or timestamp."""
    record: dict[str, Any] = {'type': type, 'message': {'role': type, 'content': content}}
    if uuid is not None:
        record['uuid'] = uuid
    if timestamp is not None:
        record['timestamp'] = timestamp
    record.update(extra)
    return record


def make_summary(summary: str, leaf_uuid: str = 'leaf') -> dict[str, Any]:
    return {'type': 'summary', 'summary': summary, 'leafUuid': leaf_uuid}


def text_blocks(*texts: str) -> list[dict[str, str]]:
    return [{'type': 'text', 'text': text} for text in texts]


def write_jsonl(path: Path, records: Sequence[Record]) -> Path:
    """Write records (dicts are JSON-encoded, strings written verbatim) one per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
    return path
