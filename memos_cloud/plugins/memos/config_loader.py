"""Settings resolution for the MemOS Cloud plugin.

Each option is resolved in this order:
1. Explicit plugin config passed by the host (camelCase or snake_case key)
2. MEMOS_* environment variable or ~/.openclaw/.env entry (see env.py)
3. Built-in default

Resolution never raises: malformed values fall through to the next source.
"""

import copy
import json
import math
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from . import env
from .errors import ConfigurationIncompleteError

DEFAULT_BASE_URL = "https://memos.memtensor.cn/api/openmem/v1"
DEFAULT_USER_ID = "openclaw-user"
DEFAULT_TAGS = ("openclaw",)
DEFAULT_MAX_QUERY_CHARS = 2000
DEFAULT_MAX_MESSAGE_CHARS = 2000
DEFAULT_LIMIT_NUMBER = 6
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_RETRIES = 1

SUFFIX_MODES = ("none", "counter")
CAPTURE_STRATEGIES = ("last_turn", "full_session")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class MemosSettings:
    """Resolved plugin settings. Built once per registration, never mutated."""

    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    user_id: str = DEFAULT_USER_ID

    # Conversation identity
    conversation_id: str = ""
    conversation_id_prefix: str = ""
    conversation_id_suffix: str = ""
    conversation_suffix_mode: str = "none"
    recall_global: bool = True
    reset_on_new: bool = True
    env_file_missing: bool = False

    # Recall
    recall_enabled: bool = True
    query_prefix: str = ""
    max_query_chars: int = DEFAULT_MAX_QUERY_CHARS
    memory_limit_number: int = DEFAULT_LIMIT_NUMBER
    preference_limit_number: int = DEFAULT_LIMIT_NUMBER
    include_preference: bool = True
    include_tool_memory: bool = False
    tool_memory_limit_number: int = DEFAULT_LIMIT_NUMBER
    filter: Any = None
    knowledgebase_ids: Tuple[str, ...] = ()

    # Capture
    add_enabled: bool = True
    capture_strategy: str = "last_turn"
    max_message_chars: int = DEFAULT_MAX_MESSAGE_CHARS
    include_assistant: bool = True
    tags: Tuple[str, ...] = DEFAULT_TAGS
    info: Dict[str, Any] = field(default_factory=dict)
    agent_id: Optional[str] = None
    app_id: Optional[str] = None
    allow_public: bool = False
    allow_knowledgebase_ids: Tuple[str, ...] = ()
    async_mode: bool = True

    # Transport
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retries: int = DEFAULT_RETRIES
    throttle_ms: int = 0

    def __post_init__(self):
        # Mapping options are owned by the settings, never shared with the caller.
        object.__setattr__(self, "info", copy.deepcopy(dict(self.info or {})))
        object.__setattr__(self, "filter", copy.deepcopy(self.filter))

    def missing_credentials(self) -> List[str]:
        """Names of the options recall and capture cannot work without."""
        missing = []
        if not self.api_key:
            missing.append("apiKey")
        if not self.user_id:
            missing.append("userId")
        return missing

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """Convert to a plain dict for diagnostics.

        Args:
            redact: Mask the API key, keeping only its last four characters.
        """
        data = asdict(self)
        if redact and self.api_key:
            data["api_key"] = "***" + self.api_key[-4:]
        return data


def require_credentials(settings: MemosSettings) -> None:
    """Raise ConfigurationIncompleteError if the API key or user id is missing."""
    missing = settings.missing_credentials()
    if missing:
        raise ConfigurationIncompleteError(missing)


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _explicit(config: Mapping[str, Any], name: str) -> Any:
    """Return the explicit value for a camelCase option, or None if absent/empty."""
    for key in (name, _snake_case(name)):
        if key not in config:
            continue
        value = config[key]
        if value is None:
            continue
        if isinstance(value, str) and not value:
            continue
        return value
    return None


def parse_int(value: Any) -> Optional[int]:
    """Interpret a numeric option, returning None if it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return None


def _parse_list(raw: Any) -> Optional[Tuple[str, ...]]:
    if isinstance(raw, (list, tuple, set, frozenset)):
        return tuple(str(item) for item in raw if item is not None and str(item))
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except ValueError:
            return None
        if not isinstance(parsed, list):
            return None
        return _parse_list(parsed)
    return tuple(part.strip() for part in text.split(",") if part.strip())


def _parse_mapping(raw: Any) -> Optional[Dict[str, Any]]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, str):
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class _Resolver:
    """Applies the explicit -> environment -> default order to one config dict."""

    def __init__(self, config: Mapping[str, Any]):
        self._config = config

    def text(self, name: str, env_key: str, default: str) -> str:
        value = _explicit(self._config, name)
        if value is not None:
            return str(value)
        env_value = env.load_env_var(env_key)
        return env_value if env_value is not None else default

    def optional_text(self, name: str, env_key: str) -> Optional[str]:
        value = _explicit(self._config, name)
        if value is not None:
            return str(value)
        return env.load_env_var(env_key)

    def flag(self, name: str, env_key: str, default: bool) -> bool:
        env_default = env.parse_bool(env.load_env_var(env_key), default)
        return env.parse_bool(_explicit(self._config, name), env_default)

    def number(self, name: str, env_key: str, default: int) -> int:
        for candidate in (_explicit(self._config, name), env.load_env_var(env_key)):
            parsed = parse_int(candidate)
            if parsed is not None:
                return max(0, parsed)
        return default

    def choice(self, name: str, env_key: str, choices: Tuple[str, ...], default: str) -> str:
        for candidate in (_explicit(self._config, name), env.load_env_var(env_key)):
            if candidate is None:
                continue
            normalized = str(candidate).strip().lower()
            if normalized in choices:
                return normalized
        return default

    def sequence(self, name: str, env_key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
        for candidate in (_explicit(self._config, name), env.load_env_var(env_key)):
            if candidate is None:
                continue
            parsed = _parse_list(candidate)
            if parsed is not None:
                return parsed
        return default

    def mapping(self, name: str, env_key: str) -> Dict[str, Any]:
        for candidate in (_explicit(self._config, name), env.load_env_var(env_key)):
            if candidate is None:
                continue
            parsed = _parse_mapping(candidate)
            if parsed is not None:
                return parsed
        return {}

    def passthrough(self, name: str, env_key: str) -> Any:
        value = _explicit(self._config, name)
        if isinstance(value, str):
            # Filters are JSON objects on the wire; a string is only useful if it parses.
            return _parse_mapping(value)
        if value is not None:
            return copy.deepcopy(value)
        return _parse_mapping(env.load_env_var(env_key))


def build_settings(plugin_config: Optional[Mapping[str, Any]] = None) -> MemosSettings:
    """Resolve the full settings object for one plugin registration.

    Args:
        plugin_config: Explicit options supplied by the host. Keys follow the
            host's camelCase naming (baseUrl, apiKey, ...); snake_case
            spellings are accepted too.

    Returns:
        MemosSettings with every field populated.
    """
    r = _Resolver(plugin_config or {})

    base_url = r.text("baseUrl", env.ENV_BASE_URL, DEFAULT_BASE_URL)

    return MemosSettings(
        base_url=base_url.rstrip("/"),
        api_key=r.text("apiKey", env.ENV_API_KEY, ""),
        user_id=r.text("userId", env.ENV_USER_ID, DEFAULT_USER_ID),
        conversation_id=r.text("conversationId", env.ENV_CONVERSATION_ID, ""),
        conversation_id_prefix=r.text("conversationIdPrefix", env.ENV_CONVERSATION_PREFIX, ""),
        conversation_id_suffix=r.text("conversationIdSuffix", env.ENV_CONVERSATION_SUFFIX, ""),
        conversation_suffix_mode=r.choice(
            "conversationSuffixMode", env.ENV_CONVERSATION_SUFFIX_MODE, SUFFIX_MODES, "none"
        ),
        recall_global=r.flag("recallGlobal", env.ENV_RECALL_GLOBAL, True),
        reset_on_new=r.flag("resetOnNew", env.ENV_CONVERSATION_RESET_ON_NEW, True),
        env_file_missing=env.env_file_missing(),
        recall_enabled=r.flag("recallEnabled", env.ENV_RECALL_ENABLED, True),
        query_prefix=r.text("queryPrefix", env.ENV_QUERY_PREFIX, ""),
        max_query_chars=r.number("maxQueryChars", env.ENV_MAX_QUERY_CHARS, DEFAULT_MAX_QUERY_CHARS),
        memory_limit_number=r.number(
            "memoryLimitNumber", env.ENV_MEMORY_LIMIT_NUMBER, DEFAULT_LIMIT_NUMBER
        ),
        preference_limit_number=r.number(
            "preferenceLimitNumber", env.ENV_PREFERENCE_LIMIT_NUMBER, DEFAULT_LIMIT_NUMBER
        ),
        include_preference=r.flag("includePreference", env.ENV_INCLUDE_PREFERENCE, True),
        include_tool_memory=r.flag("includeToolMemory", env.ENV_INCLUDE_TOOL_MEMORY, False),
        tool_memory_limit_number=r.number(
            "toolMemoryLimitNumber", env.ENV_TOOL_MEMORY_LIMIT_NUMBER, DEFAULT_LIMIT_NUMBER
        ),
        filter=r.passthrough("filter", env.ENV_FILTER),
        knowledgebase_ids=r.sequence("knowledgebaseIds", env.ENV_KNOWLEDGEBASE_IDS, ()),
        add_enabled=r.flag("addEnabled", env.ENV_ADD_ENABLED, True),
        capture_strategy=r.choice(
            "captureStrategy", env.ENV_CAPTURE_STRATEGY, CAPTURE_STRATEGIES, "last_turn"
        ),
        max_message_chars=r.number(
            "maxMessageChars", env.ENV_MAX_MESSAGE_CHARS, DEFAULT_MAX_MESSAGE_CHARS
        ),
        include_assistant=r.flag("includeAssistant", env.ENV_INCLUDE_ASSISTANT, True),
        tags=r.sequence("tags", env.ENV_TAGS, DEFAULT_TAGS),
        info=r.mapping("info", env.ENV_INFO),
        agent_id=r.optional_text("agentId", env.ENV_AGENT_ID),
        app_id=r.optional_text("appId", env.ENV_APP_ID),
        allow_public=r.flag("allowPublic", env.ENV_ALLOW_PUBLIC, False),
        allow_knowledgebase_ids=r.sequence(
            "allowKnowledgebaseIds", env.ENV_ALLOW_KNOWLEDGEBASE_IDS, ()
        ),
        async_mode=r.flag("asyncMode", env.ENV_ASYNC_MODE, True),
        timeout_ms=r.number("timeoutMs", env.ENV_TIMEOUT_MS, DEFAULT_TIMEOUT_MS),
        retries=r.number("retries", env.ENV_RETRIES, DEFAULT_RETRIES),
        throttle_ms=r.number("throttleMs", env.ENV_THROTTLE_MS, 0),
    )
