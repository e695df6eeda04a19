"""Markdown body renderer.

Turns a recipe body into HTML with Python-Markdown and collects the
structure the site needs alongside it: the heading outline (for the table of
contents), the fenced code blocks with their language hints, and a prose
word count for reading time.

Fenced code is handled by ``pymdownx.superfences``, so fences nested in list
items and fences with options after the language (``yaml title="pod.yaml"``)
render as code blocks. The fence scanner below follows the same rules, so the
blocks it reports are the blocks that appear in the HTML.

Rendering is pure: every call builds a fresh ``markdown.Markdown`` instance,
so identical input always gives byte-identical output.
"""

from __future__ import annotations

import html
import math
import re
from dataclasses import dataclass

import markdown

EXTENSIONS = [
    "attr_list",
    "tables",
    "toc",
    "sane_lists",
    "pymdownx.highlight",
    "pymdownx.superfences",
]
EXTENSION_CONFIGS = {
    "pymdownx.highlight": {"use_pygments": False, "language_prefix": "language-"},
    "toc": {"permalink": False},
}

WORDS_PER_MINUTE = 200

FENCE_OPEN = re.compile(r"^(?P<ws>[> ]*)(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>.*?)[ \t]*$")
FENCE_INFO = re.compile(
    r"""^(?:
        \{(?P<attrs>[^\n]*)\}
        |
        \.?(?P<lang>[\w#.+-]*)[ \t]*
        (?P<options>(?:[a-zA-Z][a-zA-Z0-9_]*(?:=(?P<quot>"|').*?(?P=quot))?[ \t]*)*)
    )$""",
    re.VERBOSE,
)
WORD = re.compile(r"[A-Za-z0-9][\w'’.-]*")


@dataclass(frozen=True)
class CodeBlock:
    language: str | None
    code: str
    line: int  # 1-based line of the opening fence within the body


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    anchor: str


@dataclass(frozen=True)
class RenderedBody:
    html: str
    headings: tuple[Heading, ...]
    code_blocks: tuple[CodeBlock, ...]
    word_count: int
    reading_minutes: int

    @property
    def languages(self) -> list[str]:
        """Distinct fence languages in order of first use."""
        return list(dict.fromkeys(b.language for b in self.code_blocks if b.language))


def _fence_language(info: str) -> str | None:
    """Language of a fence info string: ``yaml title="x"`` -> ``yaml``, ``{.go}`` -> ``go``."""
    token = info.strip().strip("{}").strip().split(None, 1)
    if not token:
        return None
    lang = token[0].lstrip(".").lower()
    return lang or None


def _close_fence(lines: list[str], start: int, ws: str, fence: str) -> int | None:
    """Index of the line closing the fence opened at ``start``, or None.

    The closing line repeats the opening fence exactly. A non-blank line
    indented less than the opening fence ends the search without a match.
    """
    closing = re.compile(r"^[> ]*" + re.escape(fence) + r"[ \t]*$")
    for i in range(start + 1, len(lines)):
        line = lines[i]
        if not line.strip():
            continue
        if not line.startswith(ws):
            return None
        if closing.match(line):
            return i
    return None


def _scan(body: str) -> tuple[list[CodeBlock], list[str]]:
    """Walk the body once, returning its code blocks and its prose lines.

    A fence whose info string is not a language plus options, or that is
    never closed, is not a code block; its lines count as prose.
    """
    blocks: list[CodeBlock] = []
    prose: list[str] = []
    lines = body.splitlines()
    i = 0
    while i < len(lines):
        match = FENCE_OPEN.match(lines[i])
        end = None
        if match and FENCE_INFO.match(match.group("info")):
            end = _close_fence(lines, i, match.group("ws"), match.group("fence"))
        if end is None:
            prose.append(lines[i])
            i += 1
            continue

        indent = len(match.group("ws"))
        blocks.append(CodeBlock(
            language=_fence_language(match.group("info")),
            code="\n".join(line[indent:] for line in lines[i + 1:end]),
            line=i + 1,
        ))
        i = end + 1
    return blocks, prose


def extract_code_blocks(body: str) -> list[CodeBlock]:
    """Fenced code blocks of a Markdown body, in document order.

    Args:
        body: Markdown text without front matter.

    Returns:
        One CodeBlock per fence that renders as code. The language is the
        lower-cased first token of the info string, or None.
    """
    return _scan(body)[0]


def _flatten_toc(tokens: list[dict]) -> list[Heading]:
    headings: list[Heading] = []
    for token in tokens:
        headings.append(Heading(
            level=int(token["level"]),
            text=html.unescape(token["name"]),
            anchor=token["id"],
        ))
        headings.extend(_flatten_toc(token.get("children", [])))
    return headings


def render_markdown(body: str) -> RenderedBody:
    """Render a Markdown body to HTML plus its outline and code blocks."""
    md = markdown.Markdown(extensions=EXTENSIONS, extension_configs=EXTENSION_CONFIGS)
    rendered = md.convert(body)
    blocks, prose = _scan(body)
    words = sum(len(WORD.findall(line)) for line in prose)
    return RenderedBody(
        html=rendered,
        headings=tuple(_flatten_toc(getattr(md, "toc_tokens", []))),
        code_blocks=tuple(blocks),
        word_count=words,
        reading_minutes=max(1, math.ceil(words / WORDS_PER_MINUTE)),
    )
