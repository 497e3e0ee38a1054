"""Tests for project directory name encoding/decoding."""

from __future__ import annotations

from pathlib import Path

import pytest

from conversation_manager.paths import UNKNOWN, decode_path, encode_path, project_label, resolve_project_dir


@pytest.mark.parametrize(
    'working_directory',
    [
        'C:\\Users\\dev\\Desktop\\ccmonitor',
        'D:\\work',
        'C:\\',
        '\\home\\dev\\project',
    ],
)
def test_decode_inverts_encode(working_directory: str) -> None:
    assert decode_path(encode_path(working_directory)) == working_directory


def test_decode_examples() -> None:
    assert decode_path('C--Users-user-Desktop-project') == 'C:\\Users\\user\\Desktop\\project'
    assert decode_path('-home-wiz-AI') == '\\home\\wiz\\AI'


def test_encode_unix_path() -> None:
    assert encode_path('/home/wiz/AI') == '-home-wiz-AI'


def test_project_label() -> None:
    assert project_label('C:\\Users\\dev\\ccmonitor') == 'ccmonitor'
    assert project_label('C:\\') == UNKNOWN
    assert project_label('') == UNKNOWN


def test_resolve_project_dir_with_root(tmp_path: Path) -> None:
    root = tmp_path / 'anything'
    label, working_directory = resolve_project_dir(root / 'C--src-app' / 'id.jsonl', root)
    assert (label, working_directory) == ('app', 'C:\\src\\app')


def test_resolve_project_dir_wrong_position(tmp_path: Path) -> None:
    root = tmp_path / 'projects'
    nested = root / 'C--src-app' / 'subagents' / 'id.jsonl'
    assert resolve_project_dir(nested, root) == (UNKNOWN, UNKNOWN)
