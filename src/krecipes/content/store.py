"""Content store: discovers recipe files on disk and loads them into :class:`Recipe`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from krecipes.content.frontmatter import parse_front_matter
from krecipes.content.types import Recipe, RecipeFrontMatter, slug_for
from krecipes.errors import ContentError, InvalidFrontMatter

logger = logging.getLogger(__name__)

RECIPE_SUFFIXES = (".md", ".mdx")


@dataclass
class LoadFailure:
    path: Path
    error: Exception


@dataclass
class LoadResult:
    recipes: list[Recipe] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "(root)"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class ContentStore:
    """Recipe files under one content directory.

    Args:
        content_dir: Root directory; slugs are paths relative to it.
        suffixes: File suffixes treated as recipes (compared case-insensitively).
        default_author: Filled in when a document has no ``author`` key.
    """

    def __init__(
        self,
        content_dir: str | Path,
        suffixes: tuple[str, ...] = RECIPE_SUFFIXES,
        default_author: str | None = None,
    ) -> None:
        self.content_dir = Path(content_dir)
        self.suffixes = suffixes
        self.default_author = default_author

    def paths(self) -> list[Path]:
        """All recipe files under the content directory, sorted."""
        if not self.content_dir.is_dir():
            logger.warning("Content directory does not exist: %s", self.content_dir)
            return []
        found = [
            p for p in self.content_dir.rglob("*")
            if p.is_file() and p.suffix.lower() in self.suffixes
        ]
        return sorted(found)

    def read(self, path: Path) -> str:
        """Read file content with encoding fallback."""
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning("UTF-8 failed for %s, falling back to latin-1", path)
            return path.read_text(encoding="latin-1")

    def slug(self, path: Path) -> str:
        return slug_for(path, self.content_dir)

    def load(self, path: Path) -> Recipe:
        """Read, parse and validate a single recipe file.

        Raises:
            MalformedFrontMatter: Delimiters missing or YAML invalid.
            InvalidFrontMatter: Front matter does not match the recipe schema.
            OSError: The file could not be read.
        """
        text = self.read(path)
        data, body = parse_front_matter(text, path)
        if self.default_author and "author" not in data:
            data = {**data, "author": self.default_author}
        try:
            meta = RecipeFrontMatter.model_validate(data)
        except ValidationError as exc:
            raise InvalidFrontMatter(_format_validation_error(exc), path) from exc
        return Recipe(slug=self.slug(path), path=path, meta=meta, body=body)

    def load_all(self) -> LoadResult:
        """Load every recipe, collecting per-file failures instead of aborting."""
        result = LoadResult()
        for path in self.paths():
            try:
                result.recipes.append(self.load(path))
            except (ContentError, OSError) as exc:
                logger.error("Cannot load %s: %s", path, exc)
                result.failures.append(LoadFailure(path=path, error=exc))
        logger.info(
            "Loaded %d recipes from %s (%d failed)",
            len(result.recipes), self.content_dir, len(result.failures),
        )
        return result
