"""Service layer for conversation operations."""

from conversation_manager.services.codec import decode_line, encode_record, write_conversation_file
from conversation_manager.services.health import check_corruption
from conversation_manager.services.manager import ConversationStore
from conversation_manager.services.parser import generate_auto_summary, parse_file
from conversation_manager.services.repair import repair_file

__all__ = [
    'ConversationStore',
    'check_corruption',
    'decode_line',
    'encode_record',
    'generate_auto_summary',
    'parse_file',
    'repair_file',
    'write_conversation_file',
]
