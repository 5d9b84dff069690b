"""Base protocols for lifecycle plugins and the host hook API."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

# Hook handler type
#
# Parameters:
#   event: Host event object or mapping (e.g. {"prompt": ...} before a turn,
#          {"success": ..., "messages": [...]} after it)
#   ctx:   Host context for the invocation (sessionKey, sessionId, agentId)
#
# Returns a HookResult (or the host's equivalent) to prepend text to the
# prompt, or None for no effect.
HookHandler = Callable[[Any, Any], Any]

# Lifecycle event names dispatched by the host.
BEFORE_AGENT_START = "before_agent_start"
AGENT_END = "agent_end"

# Command hook fired when the user starts a new conversation (/new).
COMMAND_NEW = "command:new"


@dataclass
class HookResult:
    """Result of a pre-turn hook.

    Attributes:
        prepend_context: Text the host should place ahead of the user prompt.
        metadata: Optional details about what produced the text.
    """
    prepend_context: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape hosts read from hook results."""
        return {"prependContext": self.prepend_context}


@runtime_checkable
class HostApi(Protocol):
    """Surface a host exposes to a plugin during registration.

    Only on() is required. register_hook() is optional: hosts without a
    command-hook system simply don't provide it, and plugins must cope.
    """

    @property
    def plugin_config(self) -> Optional[Mapping[str, Any]]:
        """Explicit configuration for the plugin being registered."""
        ...

    @property
    def logger(self) -> Optional[logging.Logger]:
        """Logger the plugin should write to, or None for its own."""
        ...

    def on(self, event_name: str, handler: HookHandler) -> None:
        """Subscribe a handler to a lifecycle event."""
        ...


@runtime_checkable
class LifecyclePlugin(Protocol):
    """Interface that all lifecycle plugins must implement.

    A lifecycle plugin is registered once against a host and reacts to the
    host's lifecycle events through the handlers it subscribes in
    register(). It exposes no model tools.
    """

    @property
    def id(self) -> str:
        """Unique identifier for this plugin."""
        ...

    @property
    def kind(self) -> str:
        """Plugin kind; "lifecycle" for hook-driven plugins."""
        ...

    def register(self, api: HostApi) -> None:
        """Subscribe the plugin's handlers to the host.

        Args:
            api: The host hook API.
        """
        ...
