"""Data models for the MemOS Cloud plugin."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


def host_field(obj: Any, *names: str) -> Any:
    """Read the first present field from a host-supplied event or context.

    Hosts hand over either mappings or plain objects, and use camelCase
    keys where Python code would use snake_case, so each name is tried as
    a key and as an attribute.
    """
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class RuntimeContext:
    """Per-invocation context supplied by the host.

    Only used to resolve the conversation identity and enrich the info map
    of capture requests; never stored.

    Attributes:
        session_key: Host routing key for the session (e.g. "agent:main:main")
        session_id: Host session identifier
        agent_id: Identifier of the agent running the turn
    """
    session_key: Optional[str] = None
    session_id: Optional[str] = None
    agent_id: Optional[str] = None

    @classmethod
    def from_host(cls, ctx: Any) -> 'RuntimeContext':
        """Build from whatever the host passed as the hook context."""
        if isinstance(ctx, RuntimeContext):
            return ctx

        def text(*names: str) -> Optional[str]:
            value = host_field(ctx, *names)
            return str(value) if value not in (None, "") else None

        return cls(
            session_key=text("sessionKey", "session_key"),
            session_id=text("sessionId", "session_id"),
            agent_id=text("agentId", "agent_id"),
        )


@dataclass(frozen=True)
class SelectedMessage:
    """A message chosen for capture, with content flattened to text.

    Attributes:
        role: "user" or "assistant"
        content: Extracted, possibly truncated, text
    """
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to the wire shape used by /add/message."""
        return {"role": self.role, "content": self.content}
