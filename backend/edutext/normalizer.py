from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, Optional, Union

from .catalog import DEFAULT_DESCRIPTION, DEFAULT_TITLE, ContentType, DefaultDocument, MainContent, conforms, schema_kind_for
from .domain import ProviderReply

logger = logging.getLogger(__name__)

# Characters per token; tuned for Hangul-dense text
CHARS_PER_TOKEN = 2.5


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def _unfence(text: str) -> Optional[str]:
    # Only a single fence wrapping the whole reply counts
    if len(text) < 6 or not text.startswith("```") or not text.endswith("```"):
        return None
    inner = text[3:-3]
    if "```" in inner:
        return None
    head, sep, rest = inner.partition("\n")
    if sep and head.strip().lower() in ("", "json"):
        return rest
    return inner


def parse_strict(text: str) -> Optional[Dict[str, Any]]:
    """Return the reply as a JSON object, or None.

    The whole (stripped) reply must parse. A reply wrapped in one
    ```json fence is unwrapped first. Only objects count.
    """
    stripped = text.strip()
    data = _loads_object(stripped)
    if data is not None:
        return data
    inner = _unfence(stripped)
    if inner is None:
        return None
    return _loads_object(inner.strip())


def repair(text: str) -> Dict[str, Any]:
    """Line-based fallback; always returns the default document shape.

    Blank lines are dropped; kept lines go in as they are.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    doc = DefaultDocument(
        title=lines[0] if lines else DEFAULT_TITLE,
        description=DEFAULT_DESCRIPTION,
        mainContent=MainContent(
            introduction=" ".join(lines[1:3]),
            keyPoints=lines[3:6],
            examples=[],
        ),
        exercises=[],
        additionalNotes=lines[6:],
    )
    return doc.model_dump()


def _as_text(raw: Union[ProviderReply, str, bytes, None]) -> str:
    if isinstance(raw, ProviderReply):
        raw = raw.text
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        return raw
    return str(raw)


def normalize(raw: Union[ProviderReply, str, bytes, None], content_type: Any = ContentType.VOCABULARY) -> Dict[str, Any]:
    text = _as_text(raw)
    data = parse_strict(text)
    if data is None:
        logger.debug("Reply is not a JSON object (%d chars); using line repair", len(text))
        return repair(text)
    kind = schema_kind_for(content_type)
    if not conforms(kind, data):
        # Parsed replies are returned as-is even when the shape differs
        logger.debug("Parsed reply does not match the %s schema", kind.value)
    return data


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text or "") / CHARS_PER_TOKEN)


def tokens_for(reply: ProviderReply) -> int:
    if reply.tokens_used is not None and reply.tokens_used >= 0:
        return reply.tokens_used
    return estimate_tokens(reply.text)
