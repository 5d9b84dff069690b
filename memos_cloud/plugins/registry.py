"""Plugin registry and in-process hook dispatch.

Embedding hosts (and the tests) use HookRegistry as the host side of the
lifecycle plugin contract: it discovers plugins, hands each one a HostApi
view when it is enabled, and dispatches lifecycle and command events to the
handlers the plugins subscribed.
"""

import importlib
import importlib.metadata
import logging
import pkgutil
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .base import HookHandler, LifecyclePlugin

logger = logging.getLogger(__name__)

# Entry point group names by plugin kind
PLUGIN_ENTRY_POINT_GROUPS = {
    "lifecycle": "memos_cloud.plugins",
}


class PluginApi:
    """HostApi view handed to one plugin during registration."""

    def __init__(
        self,
        registry: 'HookRegistry',
        plugin_id: str,
        plugin_config: Optional[Mapping[str, Any]] = None,
        plugin_logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry
        self._plugin_id = plugin_id
        self._plugin_config = dict(plugin_config or {})
        self._logger = plugin_logger

    @property
    def plugin_config(self) -> Dict[str, Any]:
        return self._plugin_config

    @property
    def logger(self) -> Optional[logging.Logger]:
        return self._logger

    def on(self, event_name: str, handler: HookHandler) -> None:
        self._registry._add_handler(self._registry._handlers, event_name, self._plugin_id, handler)

    def register_hook(self, event_name: str, handler: HookHandler, name: Optional[str] = None) -> None:
        self._registry._add_handler(
            self._registry._hooks, event_name, name or self._plugin_id, handler
        )


class HookRegistry:
    """Manages plugin discovery, registration and hook dispatch.

    Usage:
        registry = HookRegistry()
        registry.discover()

        print(registry.list_available())  # ['memos-cloud-openclaw-plugin']

        registry.enable('memos-cloud-openclaw-plugin', config={'apiKey': '...'})

        # Before the agent runs: collect context to prepend
        results = registry.emit('before_agent_start', {'prompt': prompt}, ctx)

        # After the agent finishes
        registry.emit('agent_end', {'success': True, 'messages': history}, ctx)

        # When the user types /new
        registry.trigger('command:new', {'type': 'command', 'action': 'new'}, ctx)
    """

    def __init__(self):
        self._plugins: Dict[str, LifecyclePlugin] = {}
        self._enabled: List[str] = []
        self._handlers: Dict[str, List[Tuple[str, HookHandler]]] = {}
        self._hooks: Dict[str, List[Tuple[str, HookHandler]]] = {}

    @staticmethod
    def _add_handler(
        table: Dict[str, List[Tuple[str, HookHandler]]],
        event_name: str,
        owner: str,
        handler: HookHandler,
    ) -> None:
        table.setdefault(event_name, []).append((owner, handler))

    def discover(self, plugin_kind: str = "lifecycle", include_directory: bool = True) -> List[str]:
        """Discover plugins via entry points and optionally directory scanning.

        Entry points allow external packages to register plugins:
            [project.entry-points."memos_cloud.plugins"]
            my_plugin = "my_package.plugin:create_plugin"

        Args:
            plugin_kind: Kind of plugin to discover. Only plugins with a
                matching PLUGIN_KIND are loaded from the directory.
            include_directory: Also scan this package for local plugins.

        Returns:
            List of discovered plugin ids.
        """
        discovered = self._discover_via_entry_points(plugin_kind)
        if include_directory:
            discovered.extend(self._discover_via_directory(plugin_kind))
        return discovered

    def _discover_via_entry_points(self, plugin_kind: str) -> List[str]:
        discovered: List[str] = []

        group = PLUGIN_ENTRY_POINT_GROUPS.get(plugin_kind)
        if not group:
            return discovered

        for ep in importlib.metadata.entry_points(group=group):
            try:
                plugin = ep.load()()
            except Exception as exc:
                logger.warning("Error loading entry point '%s': %s", ep.name, exc)
                continue

            if not isinstance(plugin, LifecyclePlugin):
                logger.warning(
                    "Entry point '%s': plugin does not implement LifecyclePlugin protocol", ep.name
                )
                continue
            if plugin.id in self._plugins:
                continue

            self._plugins[plugin.id] = plugin
            discovered.append(plugin.id)

        return discovered

    def _discover_via_directory(self, plugin_kind: str, plugin_dir: Optional[Path] = None) -> List[str]:
        if plugin_dir is None:
            plugin_dir = Path(__file__).parent

        discovered: List[str] = []

        for _finder, name, _ispkg in pkgutil.iter_modules([str(plugin_dir)]):
            if name.startswith('_') or name in ('base', 'registry'):
                continue

            try:
                module = importlib.import_module(f".{name}", package=__package__)
            except Exception as exc:
                logger.warning("Error loading plugin '%s': %s", name, exc)
                continue

            if getattr(module, 'PLUGIN_KIND', None) != plugin_kind:
                continue
            if not hasattr(module, 'create_plugin'):
                continue

            plugin = module.create_plugin()
            if not isinstance(plugin, LifecyclePlugin):
                logger.warning("%s: plugin does not implement LifecyclePlugin protocol", name)
                continue
            if plugin.id in self._plugins:
                continue

            self._plugins[plugin.id] = plugin
            discovered.append(plugin.id)

        return discovered

    def add_plugin(self, plugin: LifecyclePlugin) -> None:
        """Make an already-constructed plugin available for enable()."""
        self._plugins[plugin.id] = plugin

    def list_available(self) -> List[str]:
        """List all known plugin ids."""
        return list(self._plugins.keys())

    def list_enabled(self) -> List[str]:
        """List ids of plugins registered against this registry."""
        return list(self._enabled)

    def get_plugin(self, plugin_id: str) -> Optional[LifecyclePlugin]:
        """Get a plugin by id, or None if unknown."""
        return self._plugins.get(plugin_id)

    def enable(
        self,
        plugin_id: str,
        config: Optional[Mapping[str, Any]] = None,
        plugin_logger: Optional[logging.Logger] = None,
    ) -> PluginApi:
        """Register a plugin's hooks.

        Args:
            plugin_id: Id of a discovered or added plugin.
            config: Explicit plugin configuration.
            plugin_logger: Logger handed to the plugin (default: its own).

        Returns:
            The PluginApi view the plugin was registered with.

        Raises:
            ValueError: If the plugin is unknown or already enabled.
        """
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            raise ValueError(f"Plugin '{plugin_id}' not found. Did you call discover()?")
        if plugin_id in self._enabled:
            raise ValueError(f"Plugin '{plugin_id}' is already enabled")

        api = PluginApi(self, plugin_id, config, plugin_logger)
        plugin.register(api)
        self._enabled.append(plugin_id)
        return api

    def list_events(self) -> List[str]:
        """Names of lifecycle events and command hooks with subscribers."""
        return sorted(set(self._handlers) | set(self._hooks))

    def handler_count(self, event_name: str) -> int:
        """Number of subscribers for an event or command hook."""
        return len(self._handlers.get(event_name, [])) + len(self._hooks.get(event_name, []))

    def emit(self, event_name: str, event: Any, ctx: Any = None) -> List[Any]:
        """Dispatch a lifecycle event to its handlers in subscription order.

        A failing handler is logged and skipped; it never stops the others.

        Returns:
            The non-None handler results.
        """
        results = []
        for owner, handler in self._handlers.get(event_name, []):
            try:
                result = handler(event, ctx)
            except Exception:
                logger.exception("Handler from '%s' failed on %s", owner, event_name)
                continue
            if result is not None:
                results.append(result)
        return results

    def trigger(self, event_name: str, event: Any, ctx: Any = None) -> None:
        """Dispatch a command hook (e.g. "command:new") to its handlers."""
        for owner, handler in self._hooks.get(event_name, []):
            try:
                handler(event, ctx)
            except Exception:
                logger.exception("Hook '%s' failed on %s", owner, event_name)
