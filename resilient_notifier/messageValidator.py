"""
Message validation and HTML sanitization for parse_mode="HTML".

Everything is escaped except a small allow-list of formatting tags, so user
supplied text can never inject markup Telegram would reject.
"""

from __future__ import annotations

import re

from resilient_notifier.notifierErrors import ApiError, MessageTooLong

MAX_MESSAGE_LENGTH = 4096
ALLOWED_TAGS = ("b", "i", "code", "pre")


def sanitize_html(text: str) -> str:
    cleaned = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    for tag in ALLOWED_TAGS:
        cleaned = cleaned.replace(f"&lt;{tag}&gt;", f"<{tag}>")
        cleaned = cleaned.replace(f"&lt;/{tag}&gt;", f"</{tag}>")
    return cleaned


_TAG_RE = re.compile(r"</?(?:%s)>" % "|".join(ALLOWED_TAGS))


def check_tag_balance(text: str) -> None:
    """Raise ApiError naming the first allow-listed tag without a partner."""
    open_tags: list[str] = []
    for match in _TAG_RE.finditer(text):
        tag = match.group()
        if not tag.startswith("</"):
            open_tags.append(tag[1:-1])
            continue
        name = tag[2:-1]
        if not open_tags or open_tags[-1] != name:
            raise ApiError(f"unmatched closing tag: {tag}")
        open_tags.pop()
    if open_tags:
        raise ApiError(f"unclosed tag: <{open_tags[-1]}>")


def validate_message(text: str) -> str:
    """
    Validate and sanitize a message.

    Returns:
        The sanitized text, safe to send with parse_mode="HTML"

    Raises:
        ApiError: Empty message or unbalanced formatting tags
        MessageTooLong: More than 4096 characters (checked before escaping)
    """
    if len(text) == 0:
        raise ApiError("message is empty")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise MessageTooLong(len(text), MAX_MESSAGE_LENGTH)

    cleaned = sanitize_html(text)
    check_tag_balance(cleaned)
    return cleaned
