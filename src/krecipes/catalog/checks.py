"""Content checks and their registry.

Each check looks at a :class:`CheckContext` (loaded recipes, load failures,
catalog and site configuration) and yields :class:`Issue` objects. Checks are
registered by name so the CLI can run all of them or a chosen subset.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Literal

from krecipes.catalog.index import Catalog
from krecipes.content.store import LoadFailure
from krecipes.content.types import Recipe
from krecipes.errors import DuplicateSlug
from krecipes.render.markdown import extract_code_blocks
from krecipes.shared.config import SiteConfig

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Issue:
    check: str
    severity: Severity
    message: str
    slug: str | None = None
    path: Path | None = None

    def __str__(self) -> str:
        where = self.slug or (str(self.path) if self.path else "-")
        return f"[{self.check}] {where}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "check": self.check,
            "severity": self.severity,
            "message": self.message,
            "slug": self.slug,
            "path": str(self.path) if self.path else None,
        }


@dataclass
class CheckContext:
    recipes: list[Recipe]
    failures: list[LoadFailure]
    catalog: Catalog
    config: SiteConfig


CheckFn = Callable[[CheckContext], Iterable[Issue]]

CHECKS: dict[str, CheckFn] = {}


def register_check(name: str) -> Callable[[CheckFn], CheckFn]:
    """Decorator registering a check function under ``name``.

    Usage:
        @register_check("my-check")
        def my_check(ctx):
            ...
    """
    def decorator(fn: CheckFn) -> CheckFn:
        CHECKS[name] = fn
        return fn
    return decorator


def get_check(name: str) -> CheckFn:
    """Look up a registered check.

    Raises:
        ValueError: If the check name is unknown.
    """
    if name not in CHECKS:
        raise ValueError(f"Unknown check: {name!r}. Available: {list(CHECKS)}")
    return CHECKS[name]


def list_checks() -> list[str]:
    return list(CHECKS)


@register_check("front-matter")
def check_front_matter(ctx: CheckContext) -> Iterable[Issue]:
    for failure in ctx.failures:
        message = getattr(failure.error, "message", str(failure.error))
        yield Issue(
            "front-matter", "error",
            f"{type(failure.error).__name__}: {message}",
            path=failure.path,
        )


@register_check("duplicate-slug")
def check_duplicate_slug(ctx: CheckContext) -> Iterable[Issue]:
    for slug, recipes in sorted(ctx.catalog.duplicates.items()):
        err = DuplicateSlug(slug, [r.path for r in recipes])
        yield Issue("duplicate-slug", "error", err.message, slug=slug)


@register_check("duplicate-title")
def check_duplicate_title(ctx: CheckContext) -> Iterable[Issue]:
    by_title: dict[str, list[Recipe]] = defaultdict(list)
    for recipe in ctx.catalog:
        by_title[" ".join(recipe.title.lower().split())].append(recipe)
    for recipes in by_title.values():
        if len(recipes) < 2:
            continue
        slugs = sorted(r.slug for r in recipes)
        for slug in slugs[1:]:
            yield Issue(
                "duplicate-title", "warning",
                f"title {recipes[0].title!r} duplicates {slugs[0]!r}; consider consolidating",
                slug=slug,
            )


@register_check("unknown-category")
def check_unknown_category(ctx: CheckContext) -> Iterable[Issue]:
    declared = set(ctx.config.categories)
    for recipe in ctx.catalog:
        if recipe.category not in declared:
            yield Issue(
                "unknown-category", "warning",
                f"category {recipe.category!r} is not one of {sorted(declared)}",
                slug=recipe.slug,
            )


@register_check("broken-related")
def check_broken_related(ctx: CheckContext) -> Iterable[Issue]:
    for slug, target in ctx.catalog.broken_links():
        reason = "refers to itself" if slug == target else "has no matching recipe"
        yield Issue(
            "broken-related", "warning",
            f"relatedRecipes entry {target!r} {reason}",
            slug=slug,
        )


@register_check("code-language")
def check_code_language(ctx: CheckContext) -> Iterable[Issue]:
    supported = set(ctx.config.highlight_languages)
    for recipe in ctx.catalog:
        for block in extract_code_blocks(recipe.body):
            if block.language and block.language not in supported:
                yield Issue(
                    "code-language", "warning",
                    f"code fence at body line {block.line} uses unsupported language {block.language!r}",
                    slug=recipe.slug,
                )


def run_checks(ctx: CheckContext, names: Iterable[str] | None = None) -> list[Issue]:
    """Run the named checks (all when ``names`` is None) in registration order."""
    selected = list(names) if names is not None else list_checks()
    issues: list[Issue] = []
    for name in selected:
        issues.extend(get_check(name)(ctx))
    return issues


def has_failures(issues: Iterable[Issue], strict: bool = False) -> bool:
    """True on any error, or on any issue at all in strict mode."""
    issues = list(issues)
    if strict:
        return bool(issues)
    return any(i.severity == "error" for i in issues)
