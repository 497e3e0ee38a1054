"""
Schemas for conversation records and operation results.

This package contains Pydantic models for on-disk JSONL records
(conversation.py) and for everything the services derive (operations.py).
"""

from __future__ import annotations

from conversation_manager.schemas.conversation import (
    ConversationRecord,
    ConversationRecordAdapter,
    MessageBody,
    MessageContent,
    MessageRecord,
    SummaryRecord,
    TextContent,
    UnknownContent,
)
from conversation_manager.schemas.operations import (
    BackupRecord,
    ConversationFile,
    ConversationMetadata,
    CorruptionVerdict,
    DeleteManyResult,
    RepairAllResult,
    RepairResult,
    SearchCriteria,
    StorageStats,
)

__all__ = [
    # Records
    'ConversationRecord',
    'ConversationRecordAdapter',
    'MessageBody',
    'MessageContent',
    'MessageRecord',
    'SummaryRecord',
    'TextContent',
    'UnknownContent',
    # Operations
    'BackupRecord',
    'ConversationFile',
    'ConversationMetadata',
    'CorruptionVerdict',
    'DeleteManyResult',
    'RepairAllResult',
    'RepairResult',
    'SearchCriteria',
    'StorageStats',
]
