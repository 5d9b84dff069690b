"""MemOS Cloud memory plugin.

Connects an agent runtime's lifecycle hooks to the MemOS Cloud API:
- Recall: before each turn, relevant memories are searched and prepended
  to the prompt as a <user_memory_context> block
- Capture: after each successful turn, the new messages are submitted for
  storage

Usage:
    registry = HookRegistry()
    registry.discover()
    registry.enable("memos-cloud-openclaw-plugin", config={
        "apiKey": "...",
        "userId": "alice",
        "captureStrategy": "last_turn",
    })
"""

from .client import MemosClient
from .config_loader import MemosSettings, build_settings
from .errors import (
    AuthenticationMissingError,
    ConfigurationIncompleteError,
    MemosError,
    TransportError,
)
from .formatter import format_context_block
from .identity import ConversationCounter, resolve_conversation_id
from .plugin import MemosCloudPlugin, create_plugin

# Plugin kind identifier for registry discovery
PLUGIN_KIND = "lifecycle"

__all__ = [
    'AuthenticationMissingError',
    'ConfigurationIncompleteError',
    'ConversationCounter',
    'MemosClient',
    'MemosCloudPlugin',
    'MemosError',
    'MemosSettings',
    'PLUGIN_KIND',
    'TransportError',
    'build_settings',
    'create_plugin',
    'format_context_block',
    'resolve_conversation_id',
]
