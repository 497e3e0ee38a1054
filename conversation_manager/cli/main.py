#!/usr/bin/env python3
"""
Command-line interface for claude-conversation-manager.

Thin presentation layer over ConversationStore: every command calls one
store operation and prints its result.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

import typer

from conversation_manager.cli.logger import CLILogger
from conversation_manager.config.base import ManagerSettings, get_settings
from conversation_manager.exceptions import ConversationManagerError, ConversationNotFoundError
from conversation_manager.schemas.operations import ConversationMetadata, DeleteManyResult, SearchCriteria
from conversation_manager.services.manager import ConversationStore

app = typer.Typer(
    name='claude-conversations',
    help='List, search, back up and clean up Claude Code conversations',
    add_completion=False,
)

T = TypeVar('T')


class CLIState:
    """Per-invocation options shared by all commands."""

    def __init__(self, projects_path: Path | None, backup_path: Path | None, verbose: bool) -> None:
        self.projects_path = projects_path
        self.backup_path = backup_path
        self.verbose = verbose

    def settings(self) -> ManagerSettings:
        if self.projects_path is None and self.backup_path is None:
            return get_settings()
        overrides: dict[str, Path] = {}
        if self.projects_path is not None:
            overrides['PROJECTS_PATH'] = self.projects_path
        if self.backup_path is not None:
            overrides['BACKUP_PATH'] = self.backup_path
        return ManagerSettings(**overrides)

    def store(self) -> ConversationStore:
        return ConversationStore(self.settings(), logger=CLILogger(verbose=self.verbose))


@app.callback()
def main_callback(
    ctx: typer.Context,
    projects_path: Path | None = typer.Option(None, '--projects-path', help='Claude Code projects directory'),
    backup_path: Path | None = typer.Option(None, '--backup-path', help='Backup directory'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Manage Claude Code conversation files."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')
    ctx.obj = CLIState(projects_path, backup_path, verbose)


def _run(ctx: typer.Context, operation: Callable[[ConversationStore], Awaitable[T]]) -> T:
    """Initialize the store, run one async operation, and map errors to exit codes."""
    state: CLIState = ctx.obj
    store = state.store()

    async def _go() -> T:
        await store.initialize()
        return await operation(store)

    try:
        return asyncio.run(_go())
    except ConversationManagerError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except OSError as e:
        typer.secho(f'Filesystem error: {e}', fg=typer.colors.RED, err=True)
        if state.verbose:
            traceback.print_exc()
        raise typer.Exit(1)


def _print_conversation(conversation: ConversationMetadata, detailed: bool) -> None:
    status = typer.style('CORRUPTED', fg=typer.colors.RED) if conversation.is_corrupted else 'ok'
    typer.echo(f'{conversation.id}  [{conversation.project_label}]  {conversation.summary}')
    if detailed:
        typer.echo(f'    Directory: {conversation.working_directory}')
        typer.echo(f'    Messages: {conversation.message_count}  Size: {conversation.file_size:,} bytes')
        typer.echo(f'    Created: {conversation.created_at.isoformat()}')
        typer.echo(f'    Modified: {conversation.modified_at.isoformat()}')
        if conversation.git_branch:
            typer.echo(f'    Branch: {conversation.git_branch}')
        typer.echo(f'    Status: {status}')
        if conversation.corruption_reason:
            typer.echo(f'    Reason: {conversation.corruption_reason}')


@app.command('list')
def list_command(
    ctx: typer.Context,
    project: str | None = typer.Option(None, '--project', '-p', help='Filter by project name'),
    corrupted: bool = typer.Option(False, '--corrupted', '-c', help='Show only corrupted conversations'),
    limit: int = typer.Option(50, '--limit', help='Maximum number of results'),
    detailed: bool = typer.Option(False, '--detailed', '-d', help='Show detailed information'),
) -> None:
    """List conversations, newest first."""
    criteria = SearchCriteria(project=project, corrupted=True if corrupted else None)
    conversations = _run(ctx, lambda store: store.search_conversations(criteria))

    if not conversations:
        typer.echo('No conversations found.')
        return

    for conversation in conversations[:limit]:
        _print_conversation(conversation, detailed)
    if len(conversations) > limit:
        typer.echo(f'... and {len(conversations) - limit} more')


@app.command()
def search(
    ctx: typer.Context,
    keyword: str = typer.Argument(..., help='Text to look for in conversation summaries'),
    project: str | None = typer.Option(None, '--project', '-p', help='Filter by project name'),
    date_from: datetime | None = typer.Option(None, '--from', formats=['%Y-%m-%d'], help='Modified on or after'),
    date_to: datetime | None = typer.Option(
        None, '--to', formats=['%Y-%m-%d'], help='Modified on or before (whole day)'
    ),
    min_size: int | None = typer.Option(None, '--min-size', help='Minimum file size in bytes'),
    max_size: int | None = typer.Option(None, '--max-size', help='Maximum file size in bytes'),
) -> None:
    """Search conversations by summary text and filters."""
    criteria = SearchCriteria(
        keyword=keyword,
        project=project,
        date_from=date_from,
        date_to=date_to.replace(hour=23, minute=59, second=59, microsecond=999999) if date_to else None,
        min_size=min_size,
        max_size=max_size,
    )
    conversations = _run(ctx, lambda store: store.search_conversations(criteria))

    typer.echo(f'Found {len(conversations)} conversation(s)')
    for conversation in conversations:
        _print_conversation(conversation, detailed=False)


@app.command()
def show(
    ctx: typer.Context,
    conversation_id: str = typer.Argument(..., help='Conversation ID (file name without .jsonl)'),
) -> None:
    """Show metadata for one conversation."""

    async def _get(store: ConversationStore) -> ConversationMetadata:
        conversation = await store.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation.metadata

    _print_conversation(_run(ctx, _get), detailed=True)


@app.command()
def delete(
    ctx: typer.Context,
    conversation_ids: list[str] | None = typer.Argument(None, help='One or more conversation IDs'),
    corrupted: bool = typer.Option(False, '--corrupted', help='Delete every corrupted conversation'),
    no_backup: bool = typer.Option(False, '--no-backup', help='Skip creating backup before deletion'),
) -> None:
    """Delete conversations (backed up first unless --no-backup)."""
    if corrupted == bool(conversation_ids):
        typer.secho('Error: Pass conversation IDs or --corrupted (not both)', fg=typer.colors.RED, err=True)
        raise typer.Exit(2)

    if corrupted:

        async def _delete_corrupted(store: ConversationStore) -> DeleteManyResult:
            found = await store.search_conversations(SearchCriteria(corrupted=True))
            return await store.delete_conversations([c.id for c in found], not no_backup)

        result = _run(ctx, _delete_corrupted)
        typer.secho(f'✓ Deleted {len(result.deleted)} corrupted conversation(s)', fg=typer.colors.GREEN)
        return

    assert conversation_ids is not None
    if len(conversation_ids) == 1:
        deleted = _run(ctx, lambda store: store.delete_conversation(conversation_ids[0], not no_backup))
        if not deleted:
            typer.secho(f'Error: Conversation not found: {conversation_ids[0]}', fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        typer.secho(f'✓ Deleted {conversation_ids[0]}', fg=typer.colors.GREEN)
        return

    result = _run(ctx, lambda store: store.delete_conversations(conversation_ids, not no_backup))
    typer.secho(f'✓ Deleted {len(result.deleted)} conversation(s)', fg=typer.colors.GREEN)
    for conversation_id in result.failed:
        typer.secho(f'  Not found: {conversation_id}', fg=typer.colors.YELLOW)
    if result.failed:
        raise typer.Exit(1)


@app.command('delete-project')
def delete_project(
    ctx: typer.Context,
    project: str = typer.Argument(..., help='Project name (case-insensitive substring)'),
    no_backup: bool = typer.Option(False, '--no-backup', help='Skip creating backup before deletion'),
) -> None:
    """Delete every conversation of a project."""
    count = _run(ctx, lambda store: store.delete_project_conversations(project, not no_backup))
    typer.secho(f'✓ Deleted {count} conversation(s) from projects matching "{project}"', fg=typer.colors.GREEN)


@app.command()
def backup(ctx: typer.Context) -> None:
    """Back up the whole projects directory."""
    record = _run(ctx, lambda store: store.create_backup())
    typer.secho('✓ Backup created successfully!', fg=typer.colors.GREEN)
    typer.echo(f'  Name: {record.name}')
    typer.echo(f'  Conversations: {record.conversation_count}')
    typer.echo(f'  Projects: {len(record.project_labels)}')
    typer.echo(f'  Size: {record.size:,} bytes')


@app.command()
def backups(ctx: typer.Context) -> None:
    """List available backups, newest first."""
    records = _run(ctx, lambda store: store.list_backups())
    if not records:
        typer.echo('No backups found.')
        return
    for record in records:
        typer.echo(
            f'{record.name}  {record.timestamp.isoformat()}  '
            f'{record.conversation_count} conversations  {record.size:,} bytes'
        )


@app.command()
def health(
    ctx: typer.Context,
    fix: bool = typer.Option(False, '--fix', help='Attempt to repair corrupted conversations'),
) -> None:
    """Report corrupted conversations, optionally repairing them."""
    corrupted = _run(ctx, lambda store: store.search_conversations(SearchCriteria(corrupted=True)))

    if not corrupted:
        typer.secho('✓ All conversations are healthy', fg=typer.colors.GREEN)
        return

    typer.secho(f'Found {len(corrupted)} corrupted conversation(s):', fg=typer.colors.YELLOW)
    for conversation in corrupted:
        typer.echo(f'  {conversation.id}  [{conversation.project_label}]  {conversation.corruption_reason}')

    if not fix:
        typer.echo()
        typer.echo('To attempt repair, run:')
        typer.secho('  claude-conversations health --fix', fg=typer.colors.CYAN)
        return

    result = _run(ctx, lambda store: store.repair_corrupted_conversations())
    typer.secho(f'✓ Repaired: {len(result.repaired)}', fg=typer.colors.GREEN)
    if result.failed:
        typer.secho(f'✗ Could not repair: {", ".join(result.failed)}', fg=typer.colors.RED)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show storage statistics."""
    result = _run(ctx, lambda store: store.get_storage_stats())
    typer.echo(f'Conversations: {result.total_conversations}')
    typer.echo(f'Projects: {result.project_count}')
    typer.echo(f'Total size: {result.total_size:,} bytes')
    typer.echo(f'Corrupted: {result.corrupted_count}')
    if result.largest_conversation:
        largest = result.largest_conversation
        typer.echo(f'Largest: {largest.id} ({largest.file_size:,} bytes)')
    if result.oldest_conversation:
        oldest = result.oldest_conversation
        typer.echo(f'Oldest: {oldest.id} ({oldest.created_at.isoformat()})')


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
