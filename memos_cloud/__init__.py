# memos_cloud package
#
# Unified import surface for the MemOS Cloud lifecycle plugin. Hosts can
# import everything they need from a single location:
#
#   from memos_cloud import (
#       HookRegistry, MemosCloudPlugin, build_settings, MemosClient,
#   )

# Plugin system
from .plugins.base import HookResult, HostApi, LifecyclePlugin
from .plugins.registry import HookRegistry

# MemOS Cloud plugin
from .plugins.memos import (
    AuthenticationMissingError,
    ConfigurationIncompleteError,
    ConversationCounter,
    MemosClient,
    MemosCloudPlugin,
    MemosError,
    MemosSettings,
    TransportError,
    build_settings,
    create_plugin,
    format_context_block,
    resolve_conversation_id,
)

__all__ = [
    # Plugin system
    "HookRegistry",
    "HookResult",
    "HostApi",
    "LifecyclePlugin",
    # MemOS Cloud plugin
    "AuthenticationMissingError",
    "ConfigurationIncompleteError",
    "ConversationCounter",
    "MemosClient",
    "MemosCloudPlugin",
    "MemosError",
    "MemosSettings",
    "TransportError",
    "build_settings",
    "create_plugin",
    "format_context_block",
    "resolve_conversation_id",
]
