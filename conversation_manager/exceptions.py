"""
Shared exceptions for claude-conversation-manager.

Domain-specific exceptions used across services.

Malformed JSONL lines, corrupted files and failed repairs are NOT exceptions:
they surface as data (skipped lines, ConversationMetadata.is_corrupted,
RepairResult.success). Filesystem errors (OSError) propagate unchanged.

Exception Hierarchy:
    ConversationManagerError (base)
    ├── ProjectsDirectoryNotFoundError (projects root missing)
    ├── ConversationNotFoundError (CLI lookups of an unknown conversation ID)
    └── BackupError (backup directory layout problems)
"""

from __future__ import annotations

from pathlib import Path


class ConversationManagerError(Exception):
    """Base exception for all claude-conversation-manager errors."""


class ProjectsDirectoryNotFoundError(ConversationManagerError):
    """Raised when the Claude Code projects directory does not exist."""

    def __init__(self, projects_path: Path) -> None:
        self.projects_path = projects_path
        super().__init__(f'Claude Code projects directory not found: {projects_path}')


class ConversationNotFoundError(ConversationManagerError):
    """Raised by callers that require a conversation to exist.

    Store operations report absence with None/False instead of raising.
    """

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f'Conversation not found: {conversation_id}')


class BackupError(ConversationManagerError):
    """Raised when the backup directory cannot be used."""
