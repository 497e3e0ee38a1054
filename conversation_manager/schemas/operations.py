"""
Operation schemas.

Models for parse results, search criteria and store operation results.
Everything here is derived by this package, never read from a conversation
file, so it uses the strict base model.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

import pydantic

from conversation_manager.schemas.conversation import MessageRecord, SummaryRecord
from conversation_manager.schemas.types import BaseStrictModel, JsonDatetime, PathStr


class StrictModel(BaseStrictModel):
    """Operations-layer strict model.

    Inherits from BaseStrictModel (extra='forbid', strict=True, frozen=True).
    """

    pass


# ==============================================================================
# Parse Results
# ==============================================================================


class CorruptionVerdict(StrictModel):
    """Classifier output. A metadata state, not an error."""

    is_corrupted: bool
    reason: str | None = None


class ConversationMetadata(StrictModel):
    """Descriptive fields derived from one conversation file.

    Recomputed from file content on every read; never cached or persisted.
    """

    id: str  # File name without .jsonl
    file_path: PathStr
    project_label: str  # Last segment of working_directory (e.g., "ccmonitor")
    working_directory: str  # Decoded from the project directory name
    summary: str  # Summary record text, or auto-generated
    message_count: int
    file_size: int  # Bytes
    created_at: datetime  # Earliest valid message timestamp (UTC)
    modified_at: datetime  # Latest valid message timestamp (UTC)
    is_corrupted: bool
    corruption_reason: str | None = None
    git_branch: str | None = None


class ConversationFile(StrictModel):
    """A parsed conversation file: messages in file order plus metadata."""

    file_path: PathStr
    messages: Sequence[MessageRecord]
    summary: SummaryRecord | None
    metadata: ConversationMetadata


class RepairResult(StrictModel):
    """Outcome of repairing one file.

    success=True does not mean the file is now healthy - repair is best effort
    and the result is never re-classified.
    """

    success: bool
    message: str
    messages_kept: int = 0


# ==============================================================================
# Search
# ==============================================================================


class SearchCriteria(StrictModel):
    """Filters for searching conversations.

    All set criteria are ANDed. None means "no constraint"; 0 is a real bound.
    Naive datetimes are interpreted as UTC.
    """

    keyword: str | None = None  # Case-insensitive substring of summary
    project: str | None = None  # Case-insensitive substring of project_label
    date_from: datetime | None = None  # Inclusive lower bound on modified_at
    date_to: datetime | None = None  # Inclusive upper bound on modified_at
    min_size: int | None = None  # Inclusive, bytes
    max_size: int | None = None  # Inclusive, bytes
    corrupted: bool | None = None
    has_git_branch: bool | None = None

    @pydantic.field_validator('date_from', 'date_to')
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def matches(self, conversation: ConversationMetadata) -> bool:
        if self.keyword is not None and self.keyword.lower() not in conversation.summary.lower():
            return False
        if self.project is not None and self.project.lower() not in conversation.project_label.lower():
            return False

        if self.date_from is not None and conversation.modified_at < self.date_from:
            return False
        if self.date_to is not None and conversation.modified_at > self.date_to:
            return False

        if self.min_size is not None and conversation.file_size < self.min_size:
            return False
        if self.max_size is not None and conversation.file_size > self.max_size:
            return False

        if self.corrupted is not None and conversation.is_corrupted != self.corrupted:
            return False
        if self.has_git_branch is not None and bool(conversation.git_branch) != self.has_git_branch:
            return False

        return True


# ==============================================================================
# Bulk Operation Results
# ==============================================================================


class DeleteManyResult(StrictModel):
    """Partition of requested IDs after a bulk delete."""

    deleted: Sequence[str]
    failed: Sequence[str]


class RepairAllResult(StrictModel):
    """Partition of corrupted conversation IDs after repair-all."""

    repaired: Sequence[str]
    failed: Sequence[str]


# ==============================================================================
# Backups
# ==============================================================================


class BackupRecord(StrictModel):
    """Self-description of one full backup, stored as backup-info.json.

    Written once at backup time and never mutated. Listing backups reads only
    these records, never the conversation files inside old backups.
    """

    timestamp: JsonDatetime
    name: str  # Directory name under the backup root
    size: int  # Total bytes of the conversations at backup time
    conversation_count: int
    project_labels: Sequence[str]

    @pydantic.field_validator('timestamp')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Hand-written records may omit the offset
        return v.replace(tzinfo=UTC) if v.tzinfo is None else v


# ==============================================================================
# Statistics
# ==============================================================================


class StorageStats(StrictModel):
    """Aggregate view over one listing."""

    total_conversations: int
    total_size: int
    project_count: int
    corrupted_count: int
    largest_conversation: ConversationMetadata | None
    oldest_conversation: ConversationMetadata | None
