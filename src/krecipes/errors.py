"""Exception hierarchy shared by the content, build and config layers."""

from __future__ import annotations

from pathlib import Path


class ContentError(Exception):
    """Base class for problems with a recipe document."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


class MalformedFrontMatter(ContentError):
    """Front matter delimiters are missing or the YAML does not parse."""


class InvalidFrontMatter(ContentError):
    """Front matter parsed but does not match the recipe schema."""


class DuplicateSlug(ContentError):
    """Two documents resolve to the same slug."""

    def __init__(self, slug: str, paths: list[Path]) -> None:
        self.slug = slug
        self.paths = paths
        listed = ", ".join(str(p) for p in paths)
        super().__init__(f"slug {slug!r} is used by {listed}")


class ConfigError(Exception):
    """Site configuration could not be read or validated."""


class BuildError(Exception):
    """The site build was aborted because content checks failed."""

    def __init__(self, message: str, issues: list | None = None) -> None:
        self.issues = issues or []
        super().__init__(message)
