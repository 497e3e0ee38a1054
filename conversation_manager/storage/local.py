"""
Local filesystem storage for conversation backups.

Layout under the backup root:

    backup-<timestamp>/              full backup (one per create_backup call)
        <encoded-project-dir>/*.jsonl    verbatim copy of the projects tree
        backup-info.json                 BackupRecord
    conversation-<id>-<timestamp>.jsonl  single-conversation backup (delete)

Only directories with a readable backup-info.json are managed backups;
everything else in the backup root is left alone.
"""

from __future__ import annotations

import logging
import pathlib
import shutil
from collections.abc import Iterator

import pydantic

from conversation_manager.exceptions import BackupError
from conversation_manager.schemas.operations import BackupRecord

logger = logging.getLogger(__name__)

BACKUP_INFO_FILENAME = 'backup-info.json'


class LocalBackupStorage:
    """Local filesystem backup storage."""

    def __init__(self, base_path: pathlib.Path) -> None:
        """
        Initialize local backup storage.

        Args:
            base_path: Backup root directory (created on demand)
        """
        self.base_path = base_path

    def ensure_exists(self) -> None:
        """
        Create the backup root if needed.

        Raises:
            BackupError: If base_path exists but is not a directory
        """
        if self.base_path.exists() and not self.base_path.is_dir():
            raise BackupError(f'Backup path is not a directory: {self.base_path}')
        self.base_path.mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: pathlib.Path, filename: str) -> pathlib.Path:
        """
        Copy one file (unmodified) into the backup root.

        Returns:
            Absolute path of the copy
        """
        self.ensure_exists()
        target = self.base_path / filename
        shutil.copy2(source, target)
        return target.absolute()

    def copy_tree(self, source: pathlib.Path, name: str) -> pathlib.Path:
        """
        Copy a directory tree verbatim into a new backup directory.

        Raises:
            FileExistsError: If a backup with this name already exists
        """
        self.ensure_exists()
        target = self.base_path / name
        shutil.copytree(source, target, symlinks=True)
        return target

    def write_record(self, record: BackupRecord) -> pathlib.Path:
        """Write a backup's self-describing record into its directory."""
        info_file = self.base_path / record.name / BACKUP_INFO_FILENAME
        info_file.write_text(record.model_dump_json(indent=2), encoding='utf-8')
        return info_file

    def read_record(self, backup_dir: pathlib.Path) -> BackupRecord | None:
        """
        Read a backup directory's record.

        Returns:
            BackupRecord named after backup_dir (a renamed or copied backup
            reports where it actually lives), or None if the directory has no
            readable, valid record
        """
        info_file = backup_dir / BACKUP_INFO_FILENAME
        try:
            record = BackupRecord.model_validate_json(info_file.read_bytes())
        except (OSError, pydantic.ValidationError) as e:
            logger.debug('Ignoring unmanaged backup directory %s: %s', backup_dir.name, e)
            return None

        if record.name != backup_dir.name:
            logger.debug('Backup %s records its name as %r', backup_dir.name, record.name)
            record = record.model_copy(update={'name': backup_dir.name})
        return record

    def iter_records(self) -> Iterator[tuple[pathlib.Path, BackupRecord]]:
        """
        Yield (directory, record) for every managed backup, in directory-name order.

        The directory is where the record was found. It is the only path to
        act on: the `name` inside the record is not trusted.
        """
        if not self.base_path.is_dir():
            return

        for entry in sorted(self.base_path.iterdir()):
            if entry.is_symlink() or not entry.is_dir():
                continue
            record = self.read_record(entry)
            if record is not None:
                yield entry, record

    def remove(self, backup_dir: pathlib.Path) -> None:
        """
        Delete a backup directory entirely, record included.

        Raises:
            BackupError: If backup_dir is not a real directory directly under the backup root
        """
        if (
            backup_dir.parent != self.base_path
            or backup_dir.name in ('', '.', '..')
            or backup_dir.is_symlink()
            or not backup_dir.is_dir()
        ):
            raise BackupError(f'Refusing to remove {backup_dir}: not a backup under {self.base_path}')
        shutil.rmtree(backup_dir)

    def exists(self, name: str) -> bool:
        return (self.base_path / name).exists()
