"""Parse the inline markers the assistant is told to use.

``*text*`` marks emphasis and ``#label|url#`` marks a link. Renderers turn a
reply into a list of parts; speech output wants the same reply with the
markers stripped.
"""

import re
from dataclasses import dataclass
from typing import Literal, Optional

LINK_PATTERN = re.compile(r"#([^|#]+)\|([^#]+)#")
BOLD_PATTERN = re.compile(r"\*([^*]+)\*")


@dataclass(frozen=True)
class MessagePart:
    type: Literal["text", "bold", "link"]
    text: str
    url: Optional[str] = None


@dataclass(frozen=True)
class _Marker:
    start: int
    end: int
    part: MessagePart


def _overlaps(a: _Marker, b: _Marker) -> bool:
    return a.start < b.end and b.start < a.end


def _find_markers(text: str) -> list[_Marker]:
    found = [
        _Marker(m.start(), m.end(), MessagePart("link", m.group(1), m.group(2)))
        for m in LINK_PATTERN.finditer(text)
    ]
    found += [
        _Marker(m.start(), m.end(), MessagePart("bold", m.group(1)))
        for m in BOLD_PATTERN.finditer(text)
    ]
    found.sort(key=lambda m: m.start)

    kept: list[_Marker] = []
    for marker in found:
        clashing = [k for k in kept if _overlaps(k, marker)]
        if not clashing:
            kept.append(marker)
        elif marker.part.type == "link" and all(
            k.part.type == "bold" for k in clashing
        ):
            # links win over any bold span they collide with
            kept = [k for k in kept if k not in clashing]
            kept.append(marker)
    kept.sort(key=lambda m: m.start)
    return kept


def parse_markers(text: str) -> list[MessagePart]:
    """Split ``text`` into plain, bold and link parts in reading order."""
    parts: list[MessagePart] = []
    cursor = 0
    for marker in _find_markers(text):
        if marker.start > cursor:
            parts.append(MessagePart("text", text[cursor:marker.start]))
        parts.append(marker.part)
        cursor = marker.end
    if cursor < len(text):
        parts.append(MessagePart("text", text[cursor:]))
    return parts


def strip_markers(text: str) -> str:
    """Plain-text rendering: links keep their label, bold keeps its content."""
    text = LINK_PATTERN.sub(r"\1", text)
    text = BOLD_PATTERN.sub(r"\1", text)
    return re.sub(r"[#*]", "", text)
