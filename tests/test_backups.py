"""Tests for full backups, backup listing and rotation."""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from conversation_manager.config.base import ManagerSettings
from conversation_manager.exceptions import BackupError, ProjectsDirectoryNotFoundError
from conversation_manager.services.manager import ConversationStore
from conversation_manager.storage.local import BACKUP_INFO_FILENAME, LocalBackupStorage

from helpers import make_message

AddConversation = Callable[..., Path]


@pytest.fixture
def two_projects(add_conversation: AddConversation) -> list[Path]:
    return [
        add_conversation('one', [make_message('u1', timestamp='2025-01-01T00:00:00Z')], project_dir='C--work-web'),
        add_conversation('two', [make_message('u2', timestamp='2025-02-01T00:00:00Z')], project_dir='C--work-cli'),
        add_conversation('three', [make_message('u3', timestamp='2025-03-01T00:00:00Z')], project_dir='C--work-cli'),
    ]


class TestCreateBackup:
    @pytest.mark.asyncio
    async def test_record_describes_backup(
        self, store: ConversationStore, two_projects: list[Path], backup_dir: Path
    ) -> None:
        record = await store.create_backup()

        assert record.name.startswith('backup-')
        assert ':' not in record.name
        assert record.conversation_count == 3
        assert record.size == sum(p.stat().st_size for p in two_projects)
        assert sorted(record.project_labels) == ['cli', 'web']
        assert len(record.project_labels) == 2

        info = json.loads((backup_dir / record.name / BACKUP_INFO_FILENAME).read_text())
        assert info['name'] == record.name
        assert info['conversation_count'] == 3

    @pytest.mark.asyncio
    async def test_copies_tree_verbatim(
        self, store: ConversationStore, projects_dir: Path, two_projects: list[Path], backup_dir: Path
    ) -> None:
        (two_projects[0].parent / 'notes.txt').write_text('kept too')

        record = await store.create_backup()

        for original in two_projects:
            copy = backup_dir / record.name / original.relative_to(projects_dir)
            assert copy.read_bytes() == original.read_bytes()
        assert (backup_dir / record.name / 'C--work-web' / 'notes.txt').read_text() == 'kept too'

    @pytest.mark.asyncio
    async def test_empty_projects_tree(self, store: ConversationStore) -> None:
        record = await store.create_backup()

        assert record.conversation_count == 0
        assert record.size == 0
        assert record.project_labels == []

    @pytest.mark.asyncio
    async def test_missing_projects_directory(self, tmp_path: Path) -> None:
        store = ConversationStore(
            ManagerSettings(
                CLAUDE_CONFIG_PATH=tmp_path,
                PROJECTS_PATH=tmp_path / 'missing',
                BACKUP_PATH=tmp_path / 'backups',
            )
        )

        with pytest.raises(ProjectsDirectoryNotFoundError):
            await store.create_backup()

    @pytest.mark.asyncio
    async def test_names_are_unique(self, store: ConversationStore, two_projects: list[Path]) -> None:
        records = [await store.create_backup() for _ in range(3)]
        assert len({r.name for r in records}) == 3


class TestRotation:
    @pytest.mark.asyncio
    async def test_keeps_newest(self, settings: ManagerSettings, two_projects: list[Path], backup_dir: Path) -> None:
        store = ConversationStore(settings.model_copy(update={'MAX_BACKUPS': 2}))

        first = await store.create_backup()
        second = await store.create_backup()
        third = await store.create_backup()

        backups = await store.list_backups()
        assert [b.name for b in backups] == [third.name, second.name]
        assert not (backup_dir / first.name).exists()

    @pytest.mark.asyncio
    async def test_leaves_unmanaged_entries(
        self, settings: ManagerSettings, two_projects: list[Path], backup_dir: Path
    ) -> None:
        store = ConversationStore(settings.model_copy(update={'MAX_BACKUPS': 1}))
        await store.delete_conversation('one')
        (backup_dir / 'my-own-stuff').mkdir()

        await store.create_backup()
        await store.create_backup()

        assert len(await store.list_backups()) == 1
        assert (backup_dir / 'my-own-stuff').is_dir()
        assert len(list(backup_dir.glob('conversation-one-*.jsonl'))) == 1


class TestListBackups:
    @pytest.mark.asyncio
    async def test_empty_when_no_backup_directory(self, store: ConversationStore, backup_dir: Path) -> None:
        assert not backup_dir.exists()
        assert await store.list_backups() == []

    @pytest.mark.asyncio
    async def test_newest_first(self, store: ConversationStore, two_projects: list[Path]) -> None:
        older = await store.create_backup()
        newer = await store.create_backup()

        assert [b.name for b in await store.list_backups()] == [newer.name, older.name]

    @pytest.mark.asyncio
    async def test_skips_directories_without_valid_record(
        self, store: ConversationStore, two_projects: list[Path], backup_dir: Path
    ) -> None:
        real = await store.create_backup()
        (backup_dir / 'backup-no-info').mkdir()
        (backup_dir / 'backup-bad-info').mkdir()
        (backup_dir / 'backup-bad-info' / BACKUP_INFO_FILENAME).write_text('{"name": "x"')
        (backup_dir / 'backup-wrong-shape').mkdir()
        (backup_dir / 'backup-wrong-shape' / BACKUP_INFO_FILENAME).write_text('{"name": "x"}')

        assert [b.name for b in await store.list_backups()] == [real.name]


class TestBackupDirectoriesAreAuthoritative:
    @pytest.mark.asyncio
    async def test_copied_backup_listed_and_rotated_by_directory(
        self, settings: ManagerSettings, two_projects: list[Path], backup_dir: Path
    ) -> None:
        store = ConversationStore(settings.model_copy(update={'MAX_BACKUPS': 1}))
        first = await store.create_backup()
        shutil.copytree(backup_dir / first.name, backup_dir / 'copy-of-first')

        assert sorted(b.name for b in await store.list_backups()) == sorted([first.name, 'copy-of-first'])

        latest = await store.create_backup()

        assert [b.name for b in await store.list_backups()] == [latest.name]
        assert not (backup_dir / first.name).exists()
        assert not (backup_dir / 'copy-of-first').exists()

    @pytest.mark.asyncio
    async def test_recorded_name_cannot_point_outside(
        self, tmp_path: Path, settings: ManagerSettings, two_projects: list[Path], backup_dir: Path
    ) -> None:
        victim = tmp_path / 'victim'
        victim.mkdir()
        (victim / 'keep.txt').write_text('precious')
        imported = backup_dir / 'imported'
        imported.mkdir(parents=True)
        (imported / BACKUP_INFO_FILENAME).write_text(
            json.dumps(
                {
                    'timestamp': '2020-01-01T00:00:00Z',
                    'name': '../victim',
                    'size': 0,
                    'conversation_count': 0,
                    'project_labels': [],
                }
            )
        )
        store = ConversationStore(settings.model_copy(update={'MAX_BACKUPS': 1}))

        latest = await store.create_backup()

        assert (victim / 'keep.txt').read_text() == 'precious'
        assert not imported.exists()
        assert [b.name for b in await store.list_backups()] == [latest.name]

    @pytest.mark.asyncio
    async def test_naive_record_timestamp_read_as_utc(
        self, store: ConversationStore, two_projects: list[Path], backup_dir: Path
    ) -> None:
        real = await store.create_backup()
        handmade = backup_dir / 'backup-handmade'
        handmade.mkdir()
        (handmade / BACKUP_INFO_FILENAME).write_text(
            json.dumps(
                {
                    'timestamp': '2025-01-01T00:00:00',
                    'name': 'backup-handmade',
                    'size': 0,
                    'conversation_count': 0,
                    'project_labels': [],
                }
            )
        )

        backups = await store.list_backups()

        assert [b.name for b in backups] == [real.name, 'backup-handmade']
        assert backups[1].timestamp == datetime(2025, 1, 1, tzinfo=UTC)

        await store.create_backup()
        assert len(await store.list_backups()) == 3


class TestLocalBackupStorage:
    def test_backup_path_is_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / 'backups'
        path.write_text('in the way')

        with pytest.raises(BackupError):
            LocalBackupStorage(path).ensure_exists()

    def test_copy_file_creates_root(self, tmp_path: Path) -> None:
        source = tmp_path / 'source.jsonl'
        source.write_text('{"type": "summary"}\n')
        storage = LocalBackupStorage(tmp_path / 'nested' / 'backups')

        target = storage.copy_file(source, 'copy.jsonl')

        assert target.read_text() == source.read_text()
        assert target.parent == (tmp_path / 'nested' / 'backups').absolute()

    def test_remove_refuses_paths_outside_root(self, tmp_path: Path) -> None:
        storage = LocalBackupStorage(tmp_path / 'backups')
        storage.ensure_exists()
        outside = tmp_path / 'elsewhere'
        outside.mkdir()

        with pytest.raises(BackupError):
            storage.remove(outside)
        with pytest.raises(BackupError):
            storage.remove(tmp_path / 'backups' / '..' / 'elsewhere')

        assert outside.is_dir()
