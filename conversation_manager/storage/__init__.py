"""Storage for conversation backups."""

from conversation_manager.storage.local import BACKUP_INFO_FILENAME, LocalBackupStorage

__all__ = ['BACKUP_INFO_FILENAME', 'LocalBackupStorage']
