"""Rendering of search responses into injectable context text."""

from typing import Any, Callable, List, Mapping, Optional, Sequence

from .text import truncate

DEFAULT_MAX_ITEM_CHARS = 200

CONTEXT_OPEN_TAG = "<user_memory_context>"
CONTEXT_CLOSE_TAG = "</user_memory_context>"
CONTEXT_HEADER = "Relevant memories from MemOS Cloud:"

RESULT_KEYS = (
    "memory_detail_list",
    "preference_detail_list",
    "tool_memory_detail_list",
    "preference_note",
)

# Where the result object has lived across versions of the search API.
# Probed in order; the first mapping that carries a result key wins.
RESULT_PATHS = (
    ("data",),
    ("data", "data"),
    ("data", "result"),
    (),
)


def _follow(result: Any, path: Sequence[str]) -> Optional[Mapping[str, Any]]:
    node = result
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, Mapping) else None


def locate_result(result: Any) -> Optional[Mapping[str, Any]]:
    """Find the mapping holding the detail lists in a search response."""
    for path in RESULT_PATHS:
        node = _follow(result, path)
        if node is not None and any(key in node for key in RESULT_KEYS):
            return node
    return None


def _records(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = data.get(key)
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    # Numbers render as-is; bool, None and containers carry no readable text.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _section(
    title: str,
    records: List[Mapping[str, Any]],
    render: Callable[[Mapping[str, Any]], str],
) -> List[str]:
    bullets = [line for line in (render(item) for item in records) if line]
    if not bullets:
        return []
    return [title] + bullets


def format_context_block(result: Any, max_item_chars: int = DEFAULT_MAX_ITEM_CHARS) -> str:
    """Render a search response as a newline-joined context block.

    Sections appear in a fixed order (Facts, Preferences, Tool Memories,
    then the preference note) and are left out when they have no entries.
    Unrecognized or empty responses yield an empty string.

    Args:
        result: Parsed JSON body of a /search/memory response.
        max_item_chars: Cap applied to every bullet and to the note.
    """
    data = locate_result(result)
    if data is None:
        return ""

    def fact(item: Mapping[str, Any]) -> str:
        value = _text(item.get("memory_value")) or _text(item.get("memory_key"))
        return f"- {truncate(value, max_item_chars)}" if value else ""

    def preference(item: Mapping[str, Any]) -> str:
        pref = _text(item.get("preference"))
        if not pref:
            return ""
        pref_type = _text(item.get("preference_type"))
        label = f"({pref_type}) " if pref_type else ""
        return f"- {label}{truncate(pref, max_item_chars)}"

    def tool_memory(item: Mapping[str, Any]) -> str:
        value = _text(item.get("tool_value"))
        return f"- {truncate(value, max_item_chars)}" if value else ""

    lines: List[str] = []
    lines.extend(_section("Facts:", _records(data, "memory_detail_list"), fact))
    lines.extend(_section("Preferences:", _records(data, "preference_detail_list"), preference))
    lines.extend(_section("Tool Memories:", _records(data, "tool_memory_detail_list"), tool_memory))

    note = _text(data.get("preference_note"))
    if note:
        lines.append(f"Preference Note: {truncate(note, max_item_chars)}")

    return "\n".join(lines)


def wrap_context_block(block: str) -> str:
    """Wrap a formatted block in the tags injected ahead of the prompt."""
    return f"{CONTEXT_OPEN_TAG}\n{CONTEXT_HEADER}\n{block}\n{CONTEXT_CLOSE_TAG}"
