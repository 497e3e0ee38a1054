"""
Pydantic models for Claude Code conversation JSONL records.

Only two record shapes matter to the manager:

    {"type": "summary", "summary": "...", "leafUuid": "..."}
    {"type": "user" | "assistant", "uuid": "...", "timestamp": "...",
     "message": {"role": "...", "content": "..." | [{"type": "text", "text": "..."}, ...]}, ...}

Every other line (system records, file-history snapshots, malformed JSON) is
skipped by the codec. Message fields are optional at decode time on purpose:
a message without a uuid or timestamp must still be counted so the
corruption classifier can see it.

Round-trip serialization:
- Use model_dump(exclude_unset=True, mode='json') to preserve original JSON structure
- Unmodeled fields are kept as extras (see PermissiveModel)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Literal

import pydantic

from conversation_manager.schemas.types import PermissiveModel

# ==============================================================================
# Message Content Types
# ==============================================================================


class TextContent(PermissiveModel):
    """Text content block. The only block type that feeds summaries."""

    type: Literal['text']
    text: str


class UnknownContent(PermissiveModel):
    """Any other content block (tool_use, tool_result, image, thinking, ...)."""

    type: str
MessageContent = Annotated[
    TextContent | UnknownContent,
    pydantic.Field(union_mode='left_to_right'),
]


class MessageBody(PermissiveModel):
    """The role-bearing payload nested under a message record's `message` key.

    Content that is neither a string nor a list of typed blocks is kept raw.
    """

    role: pydantic.JsonValue = None
    content: Annotated[
        Sequence[MessageContent] | str | pydantic.JsonValue,
        pydantic.Field(union_mode='left_to_right'),
    ] = None

    @property
    def has_content(self) -> bool:
        """True when content is a non-empty string or a non-empty block list."""
        return isinstance(self.content, (str, list)) and bool(self.content)


# ==============================================================================
# Records
# ==============================================================================


class SummaryRecord(PermissiveModel):
    """Conversation summary record (no uuid/timestamp)."""

    type: Literal['summary']
    summary: str
    leafUuid: str


class MessageRecord(PermissiveModel):
    """User or assistant message record.

    Only `type` must validate. Every other field takes whatever JSON the line
    carries, so a message is never lost to an odd field type. A uuid that is
    not a string counts as missing.
    """

    type: Literal['user', 'assistant']
    uuid: str | None = None
    parentUuid: pydantic.JsonValue = None
    timestamp: pydantic.JsonValue = None
    message: Annotated[
        MessageBody | pydantic.JsonValue,
        pydantic.Field(union_mode='left_to_right'),
    ] = None

    # Descriptive fields carried through unchanged
    sessionId: pydantic.JsonValue = None
    cwd: pydantic.JsonValue = None
    gitBranch: pydantic.JsonValue = None
    isSidechain: pydantic.JsonValue = None
    isMeta: pydantic.JsonValue = None

    @pydantic.field_validator('uuid', mode='before')
    @classmethod
    def non_string_uuid_is_missing(cls, v: object) -> str | None:
        return v if isinstance(v, str) else None

    @property
    def body(self) -> MessageBody | None:
        """The message payload, when it is an object."""
        return self.message if isinstance(self.message, MessageBody) else None


ConversationRecord = Annotated[
    SummaryRecord | MessageRecord,
    pydantic.Field(discriminator='type'),
]

# Type adapter for validating records (required for union types)
ConversationRecordAdapter: pydantic.TypeAdapter[ConversationRecord] = pydantic.TypeAdapter(ConversationRecord)
