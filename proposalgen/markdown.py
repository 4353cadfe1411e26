from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from jinja2 import Environment, select_autoescape

# -------- Blocks --------
@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    kind: str = "heading"


@dataclass(frozen=True)
class ListItem:
    text: str
    kind: str = "list_item"


@dataclass(frozen=True)
class ThematicBreak:
    kind: str = "thematic_break"


@dataclass(frozen=True)
class LineBreak:
    kind: str = "line_break"


@dataclass(frozen=True)
class Paragraph:
    text: str
    kind: str = "paragraph"


Block = Union[Heading, ListItem, ThematicBreak, LineBreak, Paragraph]

_HEADINGS = (("### ", 3), ("## ", 2), ("# ", 1))


def render_line(line: str) -> Block:
    for prefix, level in _HEADINGS:
        if line.startswith(prefix):
            return Heading(level=level, text=line[len(prefix):])
    if line.startswith("- ") or line.startswith("* "):
        return ListItem(text=line[2:])
    stripped = line.strip()
    if stripped == "---":
        return ThematicBreak()
    if stripped == "":
        return LineBreak()
    return Paragraph(text=line)


def render(text: str) -> List[Block]:
    """
    Classify each line of ``text`` into a block.

    Only headings, list items, rules and blank lines are recognised; inline
    markup is left as plain text and list items are not grouped.
    """
    return [render_line(line) for line in text.split("\n")]


# -------- HTML --------
_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))

BLOCKS_TEMPLATE = _env.from_string(
    """{% for b in blocks -%}
{% if b.kind == 'heading' %}<h{{ b.level }}>{{ b.text }}</h{{ b.level }}>
{% elif b.kind == 'list_item' %}<li>{{ b.text }}</li>
{% elif b.kind == 'thematic_break' %}<hr>
{% elif b.kind == 'line_break' %}<br>
{% else %}<p>{{ b.text }}</p>
{% endif %}
{%- endfor %}"""
)


def render_html(blocks: List[Block]) -> str:
    return BLOCKS_TEMPLATE.render(blocks=blocks)
