#!/usr/bin/env -S uv run

"""
Check for corrupted conversation files in ~/.claude/projects.

Runs every file through the parser and corruption classifier and prints a
report. Exits 1 when any corrupted file is found. Read-only: use
`claude-conversations health --fix` to repair.
"""

import sys
from pathlib import Path

from conversation_manager.services.parser import CONVERSATION_SUFFIX, parse_file


def main():
    print('=' * 80)
    print('Claude Code Conversation Corruption Check')
    print('=' * 80)
    print()

    projects_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.home() / '.claude' / 'projects'

    if not projects_dir.exists():
        print(f'Directory not found: {projects_dir}')
        sys.exit(1)

    all_files = []
    for project_dir in projects_dir.iterdir():
        if not project_dir.is_dir():
            continue

        for jsonl_file in project_dir.glob(f'*{CONVERSATION_SUFFIX}'):
            all_files.append(jsonl_file)

    all_files.sort()

    print(f'Found {len(all_files)} conversation files')
    print()

    corrupted_files = []
    total_messages = 0

    for jsonl_file in all_files:
        conversation = parse_file(jsonl_file, projects_dir)
        if conversation is None:
            continue

        metadata = conversation.metadata
        total_messages += metadata.message_count

        if metadata.is_corrupted:
            corrupted_files.append((jsonl_file, metadata.corruption_reason))
            print(f'✗ CORRUPTED: {jsonl_file.name}')
            print(f'  Project: {metadata.project_label}')
            print(f'  Reason: {metadata.corruption_reason}')
            print()

    print()
    print('SUMMARY')
    print('-' * 80)
    print(f'Total files checked: {len(all_files)}')
    print(f'Healthy files: {len(all_files) - len(corrupted_files)}')
    print(f'Corrupted files: {len(corrupted_files)}')
    print(f'Total messages: {total_messages:,}')
    print()

    if corrupted_files:
        print('CORRUPTED FILES:')
        for file, reason in corrupted_files:
            print(f'  {file}')
            print(f'    {reason}')
        print()
        print('✗ Found corrupted files!')
        sys.exit(1)
    else:
        print('✓ All conversation files are healthy!')
        sys.exit(0)


if __name__ == '__main__':
    main()
