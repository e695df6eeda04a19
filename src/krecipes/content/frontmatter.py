"""Split, parse and re-serialise the ``---`` delimited YAML front matter block.

A recipe file looks like::

    ---
    title: Admission webhooks
    tags: [security, webhooks]
    ---
    # Body starts here

The opening delimiter must be the very first line (a UTF-8 BOM is tolerated)
and the block ends at the next line consisting of ``---`` alone.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from krecipes.errors import MalformedFrontMatter

DELIMITER = "---"


def _is_delimiter(line: str) -> bool:
    return line.rstrip(" \t\r\n") == DELIMITER


def split_front_matter(text: str, path: str | Path | None = None) -> tuple[str, str]:
    """Return ``(yaml_text, body)`` for a document.

    Raises:
        MalformedFrontMatter: If the opening or closing delimiter is missing.
    """
    lines = text.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        raise MalformedFrontMatter("missing opening '---' delimiter", path)

    for i in range(1, len(lines)):
        if _is_delimiter(lines[i]):
            return "".join(lines[1:i]), "".join(lines[i + 1:])

    raise MalformedFrontMatter("missing closing '---' delimiter", path)


def parse_front_matter(text: str, path: str | Path | None = None) -> tuple[dict[str, Any], str]:
    """Parse a document into its front matter mapping and Markdown body.

    Raises:
        MalformedFrontMatter: On missing delimiters, YAML syntax errors, or a
            front matter root that is not a mapping.
    """
    yaml_text, body = split_front_matter(text, path)
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise MalformedFrontMatter(f"front matter is not valid YAML: {exc}", path) from exc

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"front matter must be a mapping, got {type(data).__name__}", path
        )
    return data, body


def dump_front_matter(data: dict[str, Any], body: str) -> str:
    """Serialise a mapping and body back into the document format."""
    if data:
        block = yaml.safe_dump(
            data,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=1000,
        )
    else:
        block = ""
    return f"{DELIMITER}\n{block}{DELIMITER}\n{body}"
