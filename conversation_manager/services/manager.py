"""
Conversation store - listing, search, delete, backup and repair workflows.

Framework-agnostic service over a Claude Code projects directory:

    <projects root>/<encoded-working-dir>/<conversation-id>.jsonl

There is no index. Every listing re-parses every file, so metadata never
diverges from what is on disk within a run. Lookups by ID scan all project
directories (O(files) per call).

Destructive operations back up first (when enabled), then remove. Bulk
deletes take ONE full backup up front instead of one per conversation. If the
process dies mid-way, the backup stays committed while only some originals
are gone; that window is accepted, not masked.

Filesystem errors (OSError) are never swallowed: they abort the current
operation and propagate, leaving completed sub-steps committed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from conversation_manager.config.base import ManagerSettings
from conversation_manager.exceptions import ProjectsDirectoryNotFoundError
from conversation_manager.protocols import LoggerProtocol, StdlibLogger
from conversation_manager.schemas.operations import (
    BackupRecord,
    ConversationFile,
    ConversationMetadata,
    DeleteManyResult,
    RepairAllResult,
    SearchCriteria,
    StorageStats,
)
from conversation_manager.services.parser import CONVERSATION_SUFFIX, parse_file
from conversation_manager.services.repair import repair_file
from conversation_manager.storage.local import LocalBackupStorage

__all__ = ['ConversationStore']


def _timestamp_slug(moment: datetime) -> str:
    """Filesystem-safe timestamp (no ':' or '.'), sortable by name."""
    return moment.strftime('%Y-%m-%dT%H-%M-%S-%fZ')


def _is_conversation_id(conversation_id: str) -> bool:
    """True for a plain file stem: no separators, not empty, '.' or '..'."""
    return (
        conversation_id not in ('', '.', '..')
        and '/' not in conversation_id
        and '\\' not in conversation_id
        and Path(conversation_id).name == conversation_id
    )


class ConversationStore:
    """
    Service for managing Claude Code conversation files.

    All public operations are async; per-file parsing runs in worker threads
    and results are only aggregated once every parse has finished.
    """

    def __init__(self, settings: ManagerSettings, logger: LoggerProtocol | None = None) -> None:
        """
        Initialize conversation store.

        Args:
            settings: Paths and retention policy
            logger: Optional progress logger (defaults to StdlibLogger)
        """
        self.settings = settings
        self.projects_path = settings.projects_path
        self.backups = LocalBackupStorage(settings.backup_path)
        self.logger: LoggerProtocol = logger or StdlibLogger()

    # ==========================================================================
    # Setup
    # ==========================================================================

    async def initialize(self) -> None:
        """
        Ensure the backup directory exists and the projects directory is present.

        Raises:
            ProjectsDirectoryNotFoundError: If the projects directory is missing
        """
        self.backups.ensure_exists()
        self._require_projects_dir()

    def _require_projects_dir(self) -> None:
        if not self.projects_path.is_dir():
            raise ProjectsDirectoryNotFoundError(self.projects_path)

    # ==========================================================================
    # Listing and search
    # ==========================================================================

    def _conversation_files(self) -> list[Path]:
        """All conversation files, in project-directory then file-name order."""
        self._require_projects_dir()

        files: list[Path] = []
        for project_dir in sorted(self.projects_path.iterdir()):
            if not project_dir.is_dir():
                continue
            files.extend(
                sorted(p for p in project_dir.iterdir() if p.suffix == CONVERSATION_SUFFIX and p.is_file())
            )
        return files

    async def list_conversations(self) -> list[ConversationMetadata]:
        """
        List all conversations with freshly derived metadata.

        Returns:
            Metadata sorted by modified_at, newest first. Ties keep
            enumeration order.

        Raises:
            ProjectsDirectoryNotFoundError: If the projects directory is missing
        """
        files = self._conversation_files()

        parsed = await asyncio.gather(
            *(asyncio.to_thread(parse_file, file_path, self.projects_path) for file_path in files)
        )

        conversations = [conversation.metadata for conversation in parsed if conversation is not None]
        # sorted() is stable, including with reverse=True
        return sorted(conversations, key=lambda c: c.modified_at, reverse=True)

    async def search_conversations(self, criteria: SearchCriteria | None = None) -> list[ConversationMetadata]:
        """
        Search conversations by criteria.

        Args:
            criteria: Filters to AND together (None matches everything)

        Returns:
            Matching metadata in listing order
        """
        criteria = criteria or SearchCriteria()
        return [c for c in await self.list_conversations() if criteria.matches(c)]

    def _find_conversation_file(self, conversation_id: str) -> Path | None:
        """First <project>/<id>.jsonl across project directories (IDs are globally unique).

        IDs are bare file stems; anything that could name a path elsewhere
        matches nothing.
        """
        self._require_projects_dir()

        if not _is_conversation_id(conversation_id):
            return None

        filename = f'{conversation_id}{CONVERSATION_SUFFIX}'
        for project_dir in sorted(self.projects_path.iterdir()):
            candidate = project_dir / filename
            if candidate.is_file():
                return candidate
        return None

    async def get_conversation(self, conversation_id: str) -> ConversationFile | None:
        """
        Get a parsed conversation by ID.

        Returns:
            ConversationFile, or None if no file has this ID
        """
        file_path = self._find_conversation_file(conversation_id)
        if file_path is None:
            return None
        return await asyncio.to_thread(parse_file, file_path, self.projects_path)

    # ==========================================================================
    # Delete
    # ==========================================================================

    async def delete_conversation(self, conversation_id: str, with_backup: bool = True) -> bool:
        """
        Delete one conversation, backing it up first when enabled.

        The backup happens only when both with_backup and AUTO_BACKUP are on.

        Returns:
            True if deleted, False if no file has this ID

        Raises:
            OSError: If the backup copy or the removal fails
        """
        file_path = self._find_conversation_file(conversation_id)
        if file_path is None:
            await self.logger.warning(f'Conversation not found: {conversation_id}')
            return False

        if with_backup and self.settings.AUTO_BACKUP:
            backup_file = self._backup_conversation(conversation_id, file_path)
            await self.logger.info(f'Backed up {conversation_id} to {backup_file}')

        file_path.unlink()
        await self.logger.info(f'Deleted conversation {conversation_id}')
        return True

    def _backup_conversation(self, conversation_id: str, file_path: Path) -> Path:
        slug = _timestamp_slug(datetime.now(UTC))
        return self.backups.copy_file(file_path, f'conversation-{conversation_id}-{slug}{CONVERSATION_SUFFIX}')

    async def delete_conversations(self, conversation_ids: Sequence[str], with_backup: bool = True) -> DeleteManyResult:
        """
        Delete several conversations after a single full backup.

        An empty ID list deletes nothing and takes no backup. Unknown IDs end
        up in `failed`; they never stop the rest of the batch.

        Raises:
            OSError: If the backup or a removal fails
        """
        if not conversation_ids:
            return DeleteManyResult(deleted=[], failed=[])

        if with_backup and self.settings.AUTO_BACKUP:
            await self.create_backup()

        deleted: list[str] = []
        failed: list[str] = []
        for conversation_id in conversation_ids:
            # Skip individual backup since we did bulk backup
            if await self.delete_conversation(conversation_id, with_backup=False):
                deleted.append(conversation_id)
            else:
                failed.append(conversation_id)

        return DeleteManyResult(deleted=deleted, failed=failed)

    async def delete_project_conversations(self, project: str, with_backup: bool = True) -> int:
        """
        Delete every conversation whose project label contains `project`.

        Returns:
            Number of conversations deleted
        """
        conversations = await self.search_conversations(SearchCriteria(project=project))
        result = await self.delete_conversations([c.id for c in conversations], with_backup)
        return len(result.deleted)

    # ==========================================================================
    # Repair
    # ==========================================================================

    async def repair_corrupted_conversations(self) -> RepairAllResult:
        """
        Run the repair engine over every corrupted conversation.

        A successful repair does not imply the file is now healthy.
        """
        corrupted = await self.search_conversations(SearchCriteria(corrupted=True))

        repaired: list[str] = []
        failed: list[str] = []
        for conversation in corrupted:
            result = await asyncio.to_thread(repair_file, Path(conversation.file_path), self.projects_path)
            if result.success:
                repaired.append(conversation.id)
                await self.logger.info(f'{conversation.id}: {result.message}')
            else:
                failed.append(conversation.id)
                await self.logger.warning(f'{conversation.id}: {result.message}')

        return RepairAllResult(repaired=repaired, failed=failed)

    # ==========================================================================
    # Backups
    # ==========================================================================

    async def create_backup(self) -> BackupRecord:
        """
        Copy the whole projects tree into a new backup directory, then rotate.

        Returns:
            The BackupRecord written into the new backup

        Raises:
            ProjectsDirectoryNotFoundError: If the projects directory is missing
            OSError: If copying or writing the record fails
        """
        self._require_projects_dir()

        timestamp = datetime.now(UTC)
        name = self._unique_backup_name(f'backup-{_timestamp_slug(timestamp)}')

        await self.logger.info(f'Creating backup {name}')
        await asyncio.to_thread(self.backups.copy_tree, self.projects_path, name)

        conversations = await self.list_conversations()
        record = BackupRecord(
            timestamp=timestamp,
            name=name,
            size=sum(c.file_size for c in conversations),
            conversation_count=len(conversations),
            project_labels=list(dict.fromkeys(c.project_label for c in conversations)),
        )
        self.backups.write_record(record)
        await self.logger.info(f'Backed up {record.conversation_count} conversations ({record.size:,} bytes)')

        await self._rotate_backups()
        return record

    def _unique_backup_name(self, base: str) -> str:
        name = base
        counter = 1
        while self.backups.exists(name):
            name = f'{base}-{counter}'
            counter += 1
        return name

    def _managed_backups(self) -> list[tuple[Path, BackupRecord]]:
        """(directory, record) pairs, newest first."""
        return sorted(self.backups.iter_records(), key=lambda pair: pair[1].timestamp, reverse=True)

    async def list_backups(self) -> list[BackupRecord]:
        """
        List managed backups, newest first.

        Directories without a readable backup-info.json are skipped silently.
        """
        return [record for _, record in self._managed_backups()]

    async def _rotate_backups(self) -> None:
        """Delete backups beyond MAX_BACKUPS (oldest first to go)."""
        for backup_dir, _ in self._managed_backups()[self.settings.MAX_BACKUPS :]:
            await self.logger.info(f'Removing old backup {backup_dir.name}')
            self.backups.remove(backup_dir)

    # ==========================================================================
    # Statistics
    # ==========================================================================

    async def get_storage_stats(self) -> StorageStats:
        """Totals plus the largest and oldest conversation from one listing."""
        conversations = await self.list_conversations()

        # max/min return the first extreme element, so ties keep listing order
        largest = max(conversations, key=lambda c: c.file_size, default=None)
        oldest = min(conversations, key=lambda c: c.created_at, default=None)

        return StorageStats(
            total_conversations=len(conversations),
            total_size=sum(c.file_size for c in conversations),
            project_count=len({c.project_label for c in conversations}),
            corrupted_count=sum(1 for c in conversations if c.is_corrupted),
            largest_conversation=largest,
            oldest_conversation=oldest,
        )
