"""Configuration for the conversation manager."""

from __future__ import annotations

from conversation_manager.config.base import ManagerSettings, get_settings, lazy_settings

# Module-level singleton (lazy-loaded)
settings = lazy_settings(ManagerSettings)

__all__ = ['ManagerSettings', 'get_settings', 'lazy_settings', 'settings']
