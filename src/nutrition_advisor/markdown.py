"""Renderer for the line-oriented markdown subset used by recommendations.

Every display surface goes through this module: the dashboard card and the
results page use the block sequence, the history list uses a line-truncated
block sequence, the share and "read more" affordances use the two preview
strategies, and the print view uses the HTML fragment.

Lines are classified independently of each other. Nothing is accumulated
across lines, so consecutive list lines are separate list-item blocks.
"""

import html
import re
from dataclasses import dataclass
from enum import Enum
from string import Template

ELLIPSIS = "..."
BULLET = "• "
PREVIEW_CHARS = 200
PREVIEW_WORDS = 50
HISTORY_LINES = 5

_HEADING_PREFIXES = (("# ", 1), ("## ", 2), ("### ", 3), ("#### ", 4))
_ORDERED_ITEM = re.compile(r"^(\d+)\. ")
_BOLD_RUN = re.compile(r"(\*\*[^*]+\*\*)")

_HEADING_MARKER = re.compile(r"^#{1,6}[ \t]+", re.MULTILINE)
_BULLET_MARKER = re.compile(r"^[-*][ \t]+", re.MULTILINE)
_BOLD_MARKER = re.compile(r"\*\*([^*\n]+)\*\*")
_ITALIC_MARKER = re.compile(r"\*(?=\S)([^*\n]*?\S)\*")


class BlockKind(Enum):
    """Presentation block types."""

    HEADING = "heading"
    BOLD = "bold"
    ITALIC = "italic"
    BULLET_ITEM = "bullet_item"
    ORDERED_ITEM = "ordered_item"
    SPACER = "spacer"
    MIXED = "mixed"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True)
class Segment:
    """Inline run inside a mixed paragraph."""

    text: str
    bold: bool = False


@dataclass(frozen=True)
class Block:
    """One classified line."""

    kind: BlockKind
    text: str
    source: str
    level: int | None = None
    number: int | None = None
    segments: tuple[Segment, ...] = ()


def parse_line(line: str) -> Block:
    """Classify a single line; the first matching rule wins."""
    for prefix, level in _HEADING_PREFIXES:
        if line.startswith(prefix):
            return Block(BlockKind.HEADING, line[len(prefix) :], line, level=level)
    if line.startswith("**") and line.endswith("**") and len(line) > 4:  # noqa: PLR2004
        return Block(BlockKind.BOLD, line[2:-2], line)
    if (
        line.startswith("*")
        and line.endswith("*")
        and "**" not in line
        and len(line) > 2  # noqa: PLR2004
    ):
        return Block(BlockKind.ITALIC, line[1:-1], line)
    if line.startswith(("- ", "* ")):
        return Block(BlockKind.BULLET_ITEM, line[2:], line)
    match = _ORDERED_ITEM.match(line)
    if match:
        return Block(
            BlockKind.ORDERED_ITEM,
            line[match.end() :],
            line,
            number=int(match.group(1)),
        )
    if not line.strip():
        return Block(BlockKind.SPACER, "", line)
    if "**" in line:
        segments = _split_bold(line)
        return Block(
            BlockKind.MIXED,
            "".join(segment.text for segment in segments),
            line,
            segments=segments,
        )
    return Block(BlockKind.PARAGRAPH, line, line)


def parse_blocks(text: str) -> list[Block]:
    """Split text on newlines and classify every line."""
    return [parse_line(line) for line in text.split("\n")]


def plain_text(blocks: list[Block]) -> str:
    """Rejoin block contents with newlines."""
    return "\n".join(block.text for block in blocks)


def preview_text(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Strip markup from the raw text and cut it to ``limit`` characters."""
    cleaned = _HEADING_MARKER.sub("", text)
    cleaned = _BULLET_MARKER.sub(BULLET, cleaned)
    cleaned = _BOLD_MARKER.sub(r"\1", cleaned)
    cleaned = _ITALIC_MARKER.sub(r"\1", cleaned)
    if len(cleaned) <= limit:
        return cleaned
    return cleaned[:limit] + ELLIPSIS


def preview_words(text: str, limit: int = PREVIEW_WORDS) -> str:
    """Keep the first ``limit`` whitespace-separated words."""
    words = text.split()
    if len(words) <= limit:
        return text
    return " ".join(words[:limit]) + ELLIPSIS


def truncate_lines(text: str, limit: int = HISTORY_LINES) -> tuple[str, bool]:
    """Return the first ``limit`` lines and whether any were dropped."""
    lines = text.split("\n")
    return "\n".join(lines[:limit]), len(lines) > limit


def to_print_html(text: str) -> str:
    """Render text to a minimal HTML fragment for printing."""
    return "".join(_print_fragment(block) for block in parse_blocks(text))


def print_document(text: str, title: str = "Your Nutrition Recommendation") -> str:
    """Wrap the print fragment in a standalone HTML page."""
    return _PRINT_TEMPLATE.substitute(
        title=html.escape(title),
        body=to_print_html(text),
    )


def blocks_payload(blocks: list[Block]) -> list[dict[str, object]]:
    """Serialize blocks for JSON responses."""
    payload: list[dict[str, object]] = []
    for block in blocks:
        item: dict[str, object] = {"kind": block.kind.value, "text": block.text}
        if block.level is not None:
            item["level"] = block.level
        if block.number is not None:
            item["number"] = block.number
        if block.segments:
            item["segments"] = [
                {"text": segment.text, "bold": segment.bold}
                for segment in block.segments
            ]
        payload.append(item)
    return payload


def _split_bold(line: str) -> tuple[Segment, ...]:
    # re.split keeps captured runs at odd indexes.
    segments: list[Segment] = []
    for index, part in enumerate(_BOLD_RUN.split(line)):
        if index % 2:
            segments.append(Segment(part[2:-2], bold=True))
        elif part:
            segments.append(Segment(part))
    return tuple(segments)


def _print_fragment(block: Block) -> str:
    content = html.escape(block.text, quote=False)
    if block.kind is BlockKind.HEADING:
        return f"<h{block.level}>{content}</h{block.level}>"
    if block.kind is BlockKind.BOLD:
        return f"<h4>{content}</h4>"
    if block.kind is BlockKind.ITALIC:
        return f"<h5>{content}</h5>"
    if block.kind in {BlockKind.BULLET_ITEM, BlockKind.ORDERED_ITEM}:
        return f"<li>{content}</li>"
    if block.kind is BlockKind.SPACER:
        return "<br>"
    return f"<p>{html.escape(block.source, quote=False)}</p>"


_PRINT_TEMPLATE = Template("""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>$title</title>
    <style>
      body { font-family: Georgia, serif; margin: 2rem; line-height: 1.5; }
      h1 { border-bottom: 1px solid #ccc; padding-bottom: 0.3rem; }
      li { margin-left: 1.5rem; }
      @media print { body { margin: 1cm; } }
    </style>
  </head>
  <body>
$body
  </body>
</html>
""")
