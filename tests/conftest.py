"""Shared fixtures: throwaway projects trees and stores over them."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from conversation_manager.config.base import ManagerSettings
from conversation_manager.services.manager import ConversationStore

from helpers import Record, write_jsonl


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    path = tmp_path / 'projects'
    path.mkdir()
    return path


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / 'backups'


@pytest.fixture
def settings(tmp_path: Path, projects_dir: Path, backup_dir: Path) -> ManagerSettings:
    return ManagerSettings(
        CLAUDE_CONFIG_PATH=tmp_path,
        PROJECTS_PATH=projects_dir,
        BACKUP_PATH=backup_dir,
    )


@pytest.fixture
def store(settings: ManagerSettings) -> ConversationStore:
    return ConversationStore(settings)


@pytest.fixture
def add_conversation(projects_dir: Path) -> Callable[..., Path]:
    """Write a conversation file under an encoded project directory."""

    def _add(conversation_id: str, records: Sequence[Record], project_dir: str = 'C--Users-dev-alpha') -> Path:
        return write_jsonl(projects_dir / project_dir / f'{conversation_id}.jsonl', records)

    return _add
