"""Manage Claude Code conversation logs: list, search, delete, back up and repair."""

from conversation_manager.config.base import ManagerSettings
from conversation_manager.schemas.operations import ConversationMetadata, SearchCriteria
from conversation_manager.services.manager import ConversationStore

__version__ = '0.1.0'

__all__ = ['ConversationMetadata', 'ConversationStore', 'ManagerSettings', 'SearchCriteria']
