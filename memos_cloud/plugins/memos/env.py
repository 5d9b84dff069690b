"""Environment variable resolution for the MemOS Cloud plugin.

Every option has a MEMOS_-prefixed key. Values are looked up in:
1. The process environment
2. The OpenClaw settings file (~/.openclaw/.env)

The settings file is parsed at most once per process and cached. A missing
file is not an error; it is only reported through env_file_missing() so the
plugin can log a diagnostic.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

# ============================================================
# Environment Variable Names
# ============================================================

ENV_BASE_URL = "MEMOS_BASE_URL"
ENV_API_KEY = "MEMOS_API_KEY"
ENV_USER_ID = "MEMOS_USER_ID"

# Conversation identity
ENV_CONVERSATION_ID = "MEMOS_CONVERSATION_ID"
ENV_CONVERSATION_PREFIX = "MEMOS_CONVERSATION_PREFIX"
ENV_CONVERSATION_SUFFIX = "MEMOS_CONVERSATION_SUFFIX"
ENV_CONVERSATION_SUFFIX_MODE = "MEMOS_CONVERSATION_SUFFIX_MODE"
ENV_CONVERSATION_RESET_ON_NEW = "MEMOS_CONVERSATION_RESET_ON_NEW"
ENV_RECALL_GLOBAL = "MEMOS_RECALL_GLOBAL"

# Recall
ENV_RECALL_ENABLED = "MEMOS_RECALL_ENABLED"
ENV_QUERY_PREFIX = "MEMOS_QUERY_PREFIX"
ENV_MAX_QUERY_CHARS = "MEMOS_MAX_QUERY_CHARS"
ENV_MEMORY_LIMIT_NUMBER = "MEMOS_MEMORY_LIMIT_NUMBER"
ENV_PREFERENCE_LIMIT_NUMBER = "MEMOS_PREFERENCE_LIMIT_NUMBER"
ENV_INCLUDE_PREFERENCE = "MEMOS_INCLUDE_PREFERENCE"
ENV_INCLUDE_TOOL_MEMORY = "MEMOS_INCLUDE_TOOL_MEMORY"
ENV_TOOL_MEMORY_LIMIT_NUMBER = "MEMOS_TOOL_MEMORY_LIMIT_NUMBER"
ENV_FILTER = "MEMOS_FILTER"
ENV_KNOWLEDGEBASE_IDS = "MEMOS_KNOWLEDGEBASE_IDS"

# Capture
ENV_ADD_ENABLED = "MEMOS_ADD_ENABLED"
ENV_CAPTURE_STRATEGY = "MEMOS_CAPTURE_STRATEGY"
ENV_MAX_MESSAGE_CHARS = "MEMOS_MAX_MESSAGE_CHARS"
ENV_INCLUDE_ASSISTANT = "MEMOS_INCLUDE_ASSISTANT"
ENV_TAGS = "MEMOS_TAGS"
ENV_INFO = "MEMOS_INFO"
ENV_AGENT_ID = "MEMOS_AGENT_ID"
ENV_APP_ID = "MEMOS_APP_ID"
ENV_ALLOW_PUBLIC = "MEMOS_ALLOW_PUBLIC"
ENV_ALLOW_KNOWLEDGEBASE_IDS = "MEMOS_ALLOW_KNOWLEDGEBASE_IDS"
ENV_ASYNC_MODE = "MEMOS_ASYNC_MODE"

# Transport
ENV_TIMEOUT_MS = "MEMOS_TIMEOUT_MS"
ENV_RETRIES = "MEMOS_RETRIES"
ENV_THROTTLE_MS = "MEMOS_THROTTLE_MS"

TRUTHY_TOKENS = ("1", "true", "yes", "y", "on")
FALSY_TOKENS = ("0", "false", "no", "n", "off")


def default_env_file_path() -> Path:
    """Location of the OpenClaw settings file."""
    return Path.home() / ".openclaw" / ".env"


# Module cache: the settings file is read at most once per process.
_env_file_path: Optional[Path] = None
_env_file_loaded = False
_env_file_missing = False
_env_file_values: Dict[str, Optional[str]] = {}


def _load_env_file() -> None:
    global _env_file_loaded, _env_file_missing, _env_file_values
    if _env_file_loaded:
        return
    _env_file_loaded = True

    path = env_file_path()
    if not path.is_file():
        _env_file_missing = True
        _env_file_values = {}
        return

    try:
        _env_file_values = dict(dotenv_values(path))
    except (OSError, UnicodeDecodeError):
        _env_file_missing = True
        _env_file_values = {}


def env_file_path() -> Path:
    """Settings file currently in use."""
    return _env_file_path or default_env_file_path()


def reset_env_cache(path: Optional[Path] = None) -> None:
    """Forget the cached settings file, optionally pointing at another one.

    Args:
        path: Settings file to use from now on. None restores the default
            ~/.openclaw/.env location.
    """
    global _env_file_path, _env_file_loaded, _env_file_missing, _env_file_values
    _env_file_path = Path(path) if path is not None else None
    _env_file_loaded = False
    _env_file_missing = False
    _env_file_values = {}


def load_env_var(name: str) -> Optional[str]:
    """Look up a MEMOS_* key in the environment, then in the settings file.

    Empty values count as absent.

    Returns:
        The raw string value, or None if neither source defines it.
    """
    value = os.environ.get(name)
    if value:
        return value

    _load_env_file()
    value = _env_file_values.get(name)
    if value:
        return value
    return None


def env_file_missing() -> bool:
    """Return True if the settings file could not be found or read."""
    _load_env_file()
    return _env_file_missing


def parse_bool(value: Any, default: bool) -> bool:
    """Interpret a boolean option.

    Recognizes 1/true/yes/y/on and 0/false/no/n/off (case-insensitive).
    Anything else, including None and "", yields the default.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in TRUTHY_TOKENS:
        return True
    if normalized in FALSY_TOKENS:
        return False
    return default
