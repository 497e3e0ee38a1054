"""
Path encoding utilities for Claude Code project directories.

Claude Code names each project directory after the working directory the
conversation ran in:
- `:\\` (drive separator) -> `--`
- `\\` and `/` -> `-`

WARNING: This encoding is LOSSY. A literal `-` in the original path decodes
to a separator, and a `--` produced by other characters decodes to a drive
root. Decoded paths are cosmetic metadata, never used to touch the filesystem.
"""

from __future__ import annotations

from pathlib import Path

__all__ = ['UNKNOWN', 'decode_path', 'encode_path', 'project_label', 'resolve_project_dir']

UNKNOWN = 'Unknown'
"""Sentinel for project fields that cannot be derived from a file path."""


def encode_path(path: str) -> str:
    """
    Encode a working directory for Claude's directory naming.

    Examples:
        >>> encode_path('C:\\\\Users\\\\chris\\\\project')
        'C--Users-chris-project'
    """
    return path.replace(':\\', '--').replace('\\', '-').replace('/', '-')


def decode_path(encoded: str) -> str:
    """
    Decode a project directory name back into a working directory.

    Drive roots are restored first, then every remaining hyphen becomes a
    backslash separator.

    Examples:
        >>> decode_path('C--Users-chris-project')
        'C:\\\\Users\\\\chris\\\\project'
    """
    return encoded.replace('--', ':\\').replace('-', '\\')


def project_label(working_directory: str) -> str:
    """Final path segment of a decoded working directory."""
    parts = working_directory.split('\\')
    return parts[-1] or UNKNOWN


def resolve_project_dir(file_path: Path, projects_root: Path | None = None) -> tuple[str, str]:
    """
    Derive (project_label, working_directory) from a conversation file path.

    The encoded directory is the file's parent. It is only trusted when it
    sits directly under the projects root (or, with no root given, under a
    directory named `projects`). Anything else resolves to UNKNOWN for both.
    """
    project_dir = file_path.parent
    if projects_root is not None:
        in_position = project_dir.parent == projects_root
    else:
        in_position = project_dir.parent.name == 'projects'

    if not in_position or not project_dir.name:
        return UNKNOWN, UNKNOWN

    working_directory = decode_path(project_dir.name)
    return project_label(working_directory), working_directory
