"""Request bodies for the MemOS Cloud endpoints.

Both builders are pure: they read settings, selector output and context and
never touch the network.
"""

import copy
from typing import Any, Dict, Optional, Sequence

from .config_loader import DEFAULT_MAX_QUERY_CHARS, MemosSettings
from .identity import ConversationCounter, recall_conversation_id, resolve_conversation_id
from .models import RuntimeContext, SelectedMessage

# Marker stored in the info map of every captured batch.
INFO_SOURCE = "openclaw"


def build_search_payload(
    settings: MemosSettings,
    prompt: str,
    ctx: Optional[RuntimeContext] = None,
    counter: Optional[ConversationCounter] = None,
) -> Dict[str, Any]:
    """Build the /search/memory request body.

    The query prefix is prepended before the query is cut to
    max_query_chars. conversation_id is omitted in global recall mode.
    """
    query = f"{settings.query_prefix}{prompt}"
    query = query[: settings.max_query_chars or DEFAULT_MAX_QUERY_CHARS]

    payload: Dict[str, Any] = {
        "user_id": settings.user_id,
        "query": query,
    }

    conversation_id = recall_conversation_id(settings, ctx, counter)
    if conversation_id:
        payload["conversation_id"] = conversation_id

    if settings.filter:
        payload["filter"] = copy.deepcopy(settings.filter)
    if settings.knowledgebase_ids:
        payload["knowledgebase_ids"] = list(settings.knowledgebase_ids)

    payload["memory_limit_number"] = settings.memory_limit_number
    payload["include_preference"] = settings.include_preference
    payload["preference_limit_number"] = settings.preference_limit_number
    payload["include_tool_memory"] = settings.include_tool_memory
    payload["tool_memory_limit_number"] = settings.tool_memory_limit_number

    return payload


def build_add_message_payload(
    settings: MemosSettings,
    messages: Sequence[SelectedMessage],
    ctx: Optional[RuntimeContext] = None,
    counter: Optional[ConversationCounter] = None,
) -> Dict[str, Any]:
    """Build the /add/message request body.

    The info map starts with the source marker, session key and agent id
    from the context; entries from settings.info override them.
    """
    ctx = ctx or RuntimeContext()

    payload: Dict[str, Any] = {
        "user_id": settings.user_id,
        "conversation_id": resolve_conversation_id(settings, ctx, counter),
        "messages": [message.to_dict() for message in messages],
    }

    if settings.agent_id:
        payload["agent_id"] = settings.agent_id
    if settings.app_id:
        payload["app_id"] = settings.app_id
    if settings.tags:
        payload["tags"] = list(settings.tags)

    payload["info"] = {
        "source": INFO_SOURCE,
        "sessionKey": ctx.session_key,
        "agentId": ctx.agent_id,
        **copy.deepcopy(settings.info),
    }

    payload["allow_public"] = settings.allow_public
    if settings.allow_knowledgebase_ids:
        payload["allow_knowledgebase_ids"] = list(settings.allow_knowledgebase_ids)
    payload["async_mode"] = settings.async_mode

    return payload
