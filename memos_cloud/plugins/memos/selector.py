"""Message selection for capture.

Two strategies decide which part of the turn history is submitted:

- last_turn: from the last user message to the end of the history
- full_session: the whole history

Both keep user messages, keep assistant messages only when
include_assistant is set, drop everything else and anything whose text is
empty, and truncate each kept message to max_message_chars.
"""

from typing import Any, List, Optional, Sequence

from .config_loader import MemosSettings
from .models import SelectedMessage, host_field
from .text import extract_text, truncate


def _role(message: Any) -> Optional[str]:
    role = host_field(message, "role")
    return role if isinstance(role, str) and role else None


def _keep(messages: Sequence[Any], settings: MemosSettings) -> List[SelectedMessage]:
    results: List[SelectedMessage] = []
    for message in messages:
        role = _role(message)
        if role is None:
            continue
        if role == "assistant" and not settings.include_assistant:
            continue
        if role not in ("user", "assistant"):
            continue

        content = extract_text(host_field(message, "content"))
        if not content:
            continue
        results.append(SelectedMessage(role=role, content=truncate(content, settings.max_message_chars)))
    return results


def pick_last_turn_messages(messages: Sequence[Any], settings: MemosSettings) -> List[SelectedMessage]:
    """Select the messages of the most recent turn.

    Returns an empty list when the history holds no user message.
    """
    last_user_index = None
    for index, message in enumerate(messages):
        if _role(message) == "user":
            last_user_index = index

    if last_user_index is None:
        return []
    return _keep(messages[last_user_index:], settings)


def pick_full_session_messages(messages: Sequence[Any], settings: MemosSettings) -> List[SelectedMessage]:
    """Select messages across the whole session history."""
    return _keep(messages, settings)


def select_messages(messages: Optional[Sequence[Any]], settings: MemosSettings) -> List[SelectedMessage]:
    """Apply the configured capture strategy to a turn history."""
    if not messages:
        return []
    messages = list(messages)
    if settings.capture_strategy == "full_session":
        return pick_full_session_messages(messages, settings)
    return pick_last_turn_messages(messages, settings)
