"""Plugin system for lifecycle plugin discovery and hook dispatch.

Usage:
    from memos_cloud.plugins import HookRegistry

    registry = HookRegistry()
    registry.discover()

    # List available plugins
    print(registry.list_available())  # ['memos-cloud-openclaw-plugin']

    # Register a plugin's hooks with its configuration
    registry.enable('memos-cloud-openclaw-plugin', config={'apiKey': '...'})

    # Dispatch host lifecycle events
    results = registry.emit('before_agent_start', {'prompt': 'hello'}, ctx)
"""

from .base import HookResult, HostApi, LifecyclePlugin
from .registry import HookRegistry

__all__ = ['HookRegistry', 'HookResult', 'HostApi', 'LifecyclePlugin']
