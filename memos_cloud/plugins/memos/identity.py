"""Conversation identity resolution.

The conversation id groups the messages MemOS Cloud stores for one logical
conversation. It is derived from the plugin settings, the host context and,
in "counter" suffix mode, a per-session counter that the /new command bumps.
"""

import time
from typing import Dict, Optional

from .config_loader import MemosSettings
from .models import RuntimeContext


class ConversationCounter:
    """Per-session-key conversation counters.

    Starts empty; increment() is the only way a value changes. Owned by a
    plugin instance, so separate registrations never share counters.
    """

    def __init__(self):
        self._counts: Dict[str, int] = {}

    def get(self, session_key: Optional[str]) -> int:
        """Current counter for a session key (0 when never incremented)."""
        if not session_key:
            return 0
        return self._counts.get(session_key, 0)

    def increment(self, session_key: str) -> int:
        """Advance the counter for a session key and return the new value."""
        value = self._counts.get(session_key, 0) + 1
        self._counts[session_key] = value
        return value

    def snapshot(self) -> Dict[str, int]:
        """Copy of all counters, for diagnostics."""
        return dict(self._counts)

    def __len__(self) -> int:
        return len(self._counts)


def _base_conversation_id(ctx: RuntimeContext, now_ms: Optional[int]) -> str:
    if ctx.session_key:
        return ctx.session_key
    if ctx.session_id:
        return ctx.session_id
    if ctx.agent_id:
        return f"agent:{ctx.agent_id}"
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"openclaw-{now_ms}"


def resolve_conversation_id(
    settings: MemosSettings,
    ctx: Optional[RuntimeContext] = None,
    counter: Optional[ConversationCounter] = None,
    now_ms: Optional[int] = None,
) -> str:
    """Compute the conversation id for a recall or capture request.

    Precedence:
    1. An explicit conversation id in settings is returned verbatim.
    2. Otherwise the base is the session key, the session id,
       "agent:<agentId>", or "openclaw-<epoch ms>" when the host gave none.
    3. In "counter" suffix mode "#N" is appended once the session's counter
       is above zero.
    4. The configured prefix and suffix wrap the result.

    Args:
        settings: Resolved plugin settings.
        ctx: Host context for the current hook invocation.
        counter: Counter state to read in "counter" mode.
        now_ms: Clock override for the synthesized fallback id.
    """
    if settings.conversation_id:
        return settings.conversation_id

    ctx = ctx or RuntimeContext()
    base = _base_conversation_id(ctx, now_ms)

    counter_suffix = ""
    if settings.conversation_suffix_mode == "counter" and counter is not None:
        n = counter.get(ctx.session_key)
        if n > 0:
            counter_suffix = f"#{n}"

    return (
        f"{settings.conversation_id_prefix}{base}{counter_suffix}"
        f"{settings.conversation_id_suffix}"
    )


def recall_conversation_id(
    settings: MemosSettings,
    ctx: Optional[RuntimeContext] = None,
    counter: Optional[ConversationCounter] = None,
    now_ms: Optional[int] = None,
) -> Optional[str]:
    """Conversation id to attach to a search request.

    Returns None in global recall mode, which makes the search user-scoped.
    """
    if settings.recall_global:
        return None
    return resolve_conversation_id(settings, ctx, counter, now_ms)
