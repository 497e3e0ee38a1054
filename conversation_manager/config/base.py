"""
Configuration for the conversation manager.

Settings come from environment variables (prefixed with CCM_), an optional
.env file, or explicit keyword arguments.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings


T = TypeVar('T', bound='ManagerSettings')


class ManagerSettings(pydantic_settings.BaseSettings):
    """Locations and retention policy for conversation management."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='CCM_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown settings
    )

    # Application metadata
    APP_NAME: str = 'claude-conversation-manager'
    VERSION: str = '0.1.0'

    # ~/.claude - parent of projects/ and backups/ unless overridden
    CLAUDE_CONFIG_PATH: pathlib.Path = pathlib.Path.home() / '.claude'
    PROJECTS_PATH: pathlib.Path | None = None
    BACKUP_PATH: pathlib.Path | None = None

    # Retention for full backups (single-conversation backups are never rotated)
    MAX_BACKUPS: int = 10
    AUTO_BACKUP: bool = True

    @pydantic.field_validator('CLAUDE_CONFIG_PATH', 'PROJECTS_PATH', 'BACKUP_PATH')
    @classmethod
    def expand_user(cls, v: pathlib.Path | None) -> pathlib.Path | None:
        """Expand ~ so paths from .env files behave like shell paths."""
        return v.expanduser() if v is not None else None

    @pydantic.field_validator('MAX_BACKUPS')
    @classmethod
    def validate_max_backups(cls, v: int) -> int:
        """A retention of zero would delete every backup right after creating it."""
        if v < 1:
            raise ValueError('MAX_BACKUPS must be at least 1')
        return v

    @pydantic.model_validator(mode='after')
    def derive_paths(self) -> ManagerSettings:
        """Fill projects/backups paths from CLAUDE_CONFIG_PATH when unset."""
        if self.PROJECTS_PATH is None:
            self.PROJECTS_PATH = self.CLAUDE_CONFIG_PATH / 'projects'
        if self.BACKUP_PATH is None:
            self.BACKUP_PATH = self.CLAUDE_CONFIG_PATH / 'backups'
        return self

    @property
    def projects_path(self) -> pathlib.Path:
        assert self.PROJECTS_PATH is not None  # derive_paths guarantees this
        return self.PROJECTS_PATH

    @property
    def backup_path(self) -> pathlib.Path:
        assert self.BACKUP_PATH is not None  # derive_paths guarantees this
        return self.BACKUP_PATH


def get_settings(settings_class: type[T] = ManagerSettings, env_file: str | None = None) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables (and ./.env if present).

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T] = ManagerSettings) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))
