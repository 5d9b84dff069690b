"""Text helpers shared by the selector and the context formatter."""

from typing import Any, Mapping, Optional

ELLIPSIS = "..."


def extract_text(content: Any) -> str:
    """Flatten message content to plain text.

    A string is returned as-is. A list of content blocks yields the
    space-joined ``text`` of every ``{"type": "text"}`` block, in order;
    other block kinds (images, tool calls, ...) are skipped. Any other
    shape yields an empty string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return " ".join(
            block["text"]
            for block in content
            if isinstance(block, Mapping)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        )
    return ""


def truncate(text: Optional[str], max_len: Optional[int]) -> str:
    """Cut text to max_len characters, appending "..." when anything was cut.

    A max_len of 0 or None disables truncation. Slicing is per code point,
    so multi-byte characters are never split.
    """
    if not text:
        return ""
    if not max_len:
        return text
    if len(text) > max_len:
        return text[:max_len] + ELLIPSIS
    return text
