"""Split an LLM reply into ordered text and fenced-code segments."""

import re

from orbit_bot.models.conversation import ResponseSegment, SegmentKind

# ```lang\n ... ```; a tag only counts as a language when a newline follows it
FENCE_PATTERN = re.compile(r"```(?:([\w#+.-]*)[ \t]*\n)?(.*?)```", re.DOTALL)


def segment(text: str) -> list[ResponseSegment]:
    """Split ``text`` on fenced code blocks. Pure function.

    Prose between fences becomes TEXT segments, fences become CODE segments
    tagged with their declared language ("" if none). Segments that are
    empty after trimming are dropped. An unterminated fence stays prose.
    """
    segments: list[ResponseSegment] = []
    position = 0

    for match in FENCE_PATTERN.finditer(text):
        _append(segments, SegmentKind.TEXT, text[position : match.start()])
        _append(segments, SegmentKind.CODE, match.group(2), match.group(1) or "")
        position = match.end()

    _append(segments, SegmentKind.TEXT, text[position:])
    return segments


def _append(
    segments: list[ResponseSegment], kind: SegmentKind, content: str, language: str = ""
) -> None:
    content = content.strip()
    if content:
        segments.append(ResponseSegment(kind=kind, content=content, language=language))


def render_segment(seg: ResponseSegment) -> str:
    """Slack mrkdwn for one segment."""
    if seg.kind is SegmentKind.CODE:
        return f"```{seg.language}\n{seg.content}\n```"
    return seg.content


def fallback_text(seg: ResponseSegment, limit: int = 200) -> str:
    """Short notification text for a segment posted as blocks."""
    if seg.kind is SegmentKind.CODE:
        return f"Code block ({seg.language or 'unknown'})"
    if len(seg.content) > limit:
        return seg.content[:limit] + "..."
    return seg.content
