"""MemOS Cloud lifecycle plugin: memory recall before a turn, capture after it."""

import logging
import time
from typing import Any, Callable, Optional

from ..base import AGENT_END, BEFORE_AGENT_START, COMMAND_NEW, HookResult
from . import env
from .client import MemosClient
from .config_loader import MemosSettings, build_settings, require_credentials
from .errors import ConfigurationIncompleteError
from .formatter import format_context_block, wrap_context_block
from .identity import ConversationCounter
from .models import RuntimeContext, host_field
from .payloads import build_add_message_payload, build_search_payload
from .selector import select_messages

logger = logging.getLogger(__name__)

# Prompts shorter than this are not worth a search round-trip.
MIN_PROMPT_CHARS = 3

# Cap applied to every bullet of the injected context.
RECALL_ITEM_CHARS = 200

LOG_PREFIX = "[memos-cloud]"


def is_new_conversation_event(event: Any) -> bool:
    """Return True for the host's "new conversation" (/new) command event."""
    if event is None:
        return False
    if host_field(event, "type") == "command" and host_field(event, "action") == "new":
        return True
    return host_field(event, "name", "event") == COMMAND_NEW


class MemosCloudPlugin:
    """Lifecycle plugin connecting an agent runtime to MemOS Cloud.

    Hooks:
    - before_agent_start: searches stored memories for the user prompt and
      returns them as context to prepend
    - agent_end: submits the turn's messages for storage
    - command:new (optional): advances the conversation counter so the
      next turns land in a fresh remote conversation

    The conversation counter and the last-capture timestamp live on the
    instance, so every registration keeps its own state.
    """

    id = "memos-cloud-openclaw-plugin"
    name = "MemOS Cloud OpenClaw Plugin"
    description = "MemOS Cloud recall + add memory via lifecycle hooks"
    kind = "lifecycle"

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        client_factory: Callable[[MemosSettings], MemosClient] = MemosClient,
    ):
        """Initialize the plugin.

        Args:
            clock: Seconds clock used by the capture throttle.
            client_factory: Builds the API client from resolved settings.
        """
        self._clock = clock
        self._client_factory = client_factory
        self._settings: Optional[MemosSettings] = None
        self._client: Optional[MemosClient] = None
        self._log: logging.Logger = logger
        self._counter = ConversationCounter()
        self._last_capture_at: Optional[float] = None

    @property
    def settings(self) -> Optional[MemosSettings]:
        return self._settings

    @property
    def counter(self) -> ConversationCounter:
        return self._counter

    @property
    def last_capture_at(self) -> Optional[float]:
        return self._last_capture_at

    def register(self, api: Any) -> None:
        """Resolve settings and subscribe the hooks to the host.

        Args:
            api: Host hook API exposing on(), plugin_config and optionally
                logger and register_hook().
        """
        self._settings = build_settings(getattr(api, "plugin_config", None))
        self._client = self._client_factory(self._settings)
        self._log = getattr(api, "logger", None) or logger
        settings = self._settings

        if settings.env_file_missing:
            self._log.warning(
                "%s Settings file %s not found; using plugin config and environment only.",
                LOG_PREFIX, env.env_file_path(),
            )
        missing = settings.missing_credentials()
        if missing:
            self._log.warning(
                "%s Missing %s; recall and capture are skipped until configured.",
                LOG_PREFIX, " and ".join(missing),
            )

        api.on(BEFORE_AGENT_START, self.before_agent_start)
        api.on(AGENT_END, self.agent_end)

        if settings.conversation_suffix_mode == "counter" and settings.reset_on_new:
            register_hook = getattr(api, "register_hook", None)
            if callable(register_hook):
                register_hook(COMMAND_NEW, self.on_command_new)
            else:
                self._log.warning(
                    "%s Host has no register_hook; conversation counter will not advance on /new.",
                    LOG_PREFIX,
                )

        self._log.info(
            "%s Registered (recall=%s, capture=%s, strategy=%s)",
            LOG_PREFIX, settings.recall_enabled, settings.add_enabled, settings.capture_strategy,
        )

    def _credentials_ok(self, action: str) -> bool:
        try:
            require_credentials(self._settings)
        except ConfigurationIncompleteError as e:
            self._log.warning(
                "%s Missing %s; %s skipped.", LOG_PREFIX, " or ".join(e.missing), action
            )
            return False
        return True

    def before_agent_start(self, event: Any, ctx: Any = None) -> Optional[HookResult]:
        """Recall memories for the incoming prompt.

        Returns:
            HookResult with the context block, or None when recall is
            disabled, skipped, finds nothing or fails.
        """
        settings = self._settings
        if settings is None or not settings.recall_enabled:
            return None

        prompt = host_field(event, "prompt")
        if not isinstance(prompt, str) or len(prompt) < MIN_PROMPT_CHARS:
            return None

        if not self._credentials_ok("recall"):
            return None

        try:
            payload = build_search_payload(
                settings, prompt, RuntimeContext.from_host(ctx), self._counter
            )
            result = self._client.search_memory(payload)
            block = format_context_block(result, max_item_chars=RECALL_ITEM_CHARS)
        except Exception as e:
            self._log.warning("%s recall failed: %s", LOG_PREFIX, e)
            return None

        if not block:
            return None

        return HookResult(
            prepend_context=wrap_context_block(block),
            metadata={"conversation_id": payload.get("conversation_id")},
        )

    def agent_end(self, event: Any, ctx: Any = None) -> None:
        """Capture the finished turn's messages."""
        settings = self._settings
        if settings is None or not settings.add_enabled:
            return

        messages = host_field(event, "messages")
        if not host_field(event, "success") or not messages:
            return

        if not self._credentials_ok("add"):
            return

        now = self._clock()
        if (
            settings.throttle_ms
            and self._last_capture_at is not None
            and (now - self._last_capture_at) * 1000 < settings.throttle_ms
        ):
            self._log.debug("%s Capture throttled", LOG_PREFIX)
            return
        self._last_capture_at = now

        try:
            selected = select_messages(messages, settings)
            if not selected:
                self._log.debug("%s Nothing to capture this turn", LOG_PREFIX)
                return

            payload = build_add_message_payload(
                settings, selected, RuntimeContext.from_host(ctx), self._counter
            )
            self._client.add_message(payload)
        except Exception as e:
            self._log.warning("%s add failed: %s", LOG_PREFIX, e)

    def on_command_new(self, event: Any, ctx: Any = None) -> None:
        """Start a new remote conversation for the session issuing /new."""
        if not is_new_conversation_event(event):
            return

        session_key = host_field(event, "sessionKey", "session_key")
        if not session_key:
            session_key = RuntimeContext.from_host(ctx).session_key
        if not session_key:
            return

        value = self._counter.increment(str(session_key))
        self._log.debug("%s Conversation counter for %s -> %d", LOG_PREFIX, session_key, value)


def create_plugin() -> MemosCloudPlugin:
    """Factory function to create the MemOS Cloud plugin instance."""
    return MemosCloudPlugin()
