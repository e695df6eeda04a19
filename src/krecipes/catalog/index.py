"""Catalog: the derived, rebuildable listing view over a set of recipes.

The catalog never changes its input. It orders recipes newest first (then by
slug), resolves ``relatedRecipes`` links, and groups recipes by category, tag
and difficulty for the listing pages.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable

from krecipes.content.types import DIFFICULTIES, Recipe, slugify

logger = logging.getLogger(__name__)


def _sort_key(recipe: Recipe) -> tuple:
    return (-recipe.meta.publish_date.toordinal(), recipe.slug)


@dataclass
class Catalog:
    """Ordered, read-only view over a set of recipes.

    Attributes:
        recipes: Recipes newest first, then by slug, one per slug.
        duplicates: Slug -> every recipe that claimed it, the kept one first.
    """

    recipes: list[Recipe]
    duplicates: dict[str, list[Recipe]] = field(default_factory=dict)
    _by_slug: dict[str, Recipe] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._by_slug = {r.slug: r for r in self.recipes}

    @classmethod
    def build(cls, recipes: Iterable[Recipe]) -> "Catalog":
        """Build a catalog from loaded recipes.

        The input is not modified. When two recipes share a slug the first one
        by path wins and the rest are recorded in ``duplicates``.

        Args:
            recipes: Recipes in any order.

        Returns:
            A new Catalog.
        """
        by_slug: dict[str, Recipe] = {}
        duplicates: dict[str, list[Recipe]] = {}
        for recipe in sorted(recipes, key=lambda r: str(r.path)):
            if recipe.slug in by_slug:
                duplicates.setdefault(recipe.slug, [by_slug[recipe.slug]]).append(recipe)
                logger.warning(
                    "Duplicate slug %r: %s ignored in favour of %s",
                    recipe.slug, recipe.path, by_slug[recipe.slug].path,
                )
                continue
            by_slug[recipe.slug] = recipe
        return cls(recipes=sorted(by_slug.values(), key=_sort_key), duplicates=duplicates)

    def __len__(self) -> int:
        return len(self.recipes)

    def __iter__(self):
        return iter(self.recipes)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def get(self, slug: str) -> Recipe | None:
        return self._by_slug.get(slug)

    def related(self, slug: str) -> list[Recipe]:
        """Resolved related recipes of ``slug``; unknown and self references are skipped."""
        recipe = self.get(slug)
        if recipe is None:
            return []
        return [
            self._by_slug[target]
            for target in recipe.meta.related_recipes
            if target != slug and target in self._by_slug
        ]

    def broken_links(self) -> list[tuple[str, str]]:
        """``(slug, target)`` pairs whose ``relatedRecipes`` target does not resolve."""
        broken = []
        for recipe in self.recipes:
            for target in recipe.meta.related_recipes:
                if target not in self._by_slug or target == recipe.slug:
                    broken.append((recipe.slug, target))
        return broken

    def by_category(self) -> dict[str, list[Recipe]]:
        """Recipes grouped by category slug, sorted by slug."""
        groups: dict[str, list[Recipe]] = defaultdict(list)
        for recipe in self.recipes:
            groups[recipe.category_slug].append(recipe)
        return dict(sorted(groups.items()))

    def category_labels(self) -> dict[str, str]:
        """Display label for each category slug (first spelling seen)."""
        labels: dict[str, str] = {}
        for recipe in self.recipes:
            labels.setdefault(recipe.category_slug, recipe.category)
        return labels

    def by_tag(self) -> dict[str, list[Recipe]]:
        """Recipes grouped by tag slug; a recipe appears once per distinct tag slug."""
        groups: dict[str, list[Recipe]] = defaultdict(list)
        for recipe in self.recipes:
            for tag_slug in dict.fromkeys(slugify(t) for t in recipe.tags):
                if tag_slug:
                    groups[tag_slug].append(recipe)
        return dict(sorted(groups.items()))

    def tag_labels(self) -> dict[str, str]:
        """Display label for each tag slug (first spelling seen, newest recipe first)."""
        labels: dict[str, str] = {}
        for recipe in self.recipes:
            for tag in recipe.tags:
                if slugify(tag):
                    labels.setdefault(slugify(tag), tag)
        return labels

    def by_difficulty(self) -> dict[str, list[Recipe]]:
        """Recipes grouped by difficulty, in beginner → advanced order."""
        groups: dict[str, list[Recipe]] = {level: [] for level in DIFFICULTIES}
        for recipe in self.recipes:
            groups[recipe.meta.difficulty].append(recipe)
        return {level: items for level, items in groups.items() if items}

    def filter(
        self,
        category: str | None = None,
        tag: str | None = None,
        difficulty: str | None = None,
    ) -> list[Recipe]:
        """Recipes matching every given criterion, in catalog order.

        Args:
            category: Category name or slug; compared by slug.
            tag: Tag in any spelling; compared by slug.
            difficulty: One of beginner, intermediate, advanced.

        Returns:
            Matching recipes; all recipes when no criterion is given.
        """
        result = self.recipes
        if category:
            wanted_category = slugify(category)
            result = [r for r in result if r.category_slug == wanted_category]
        if tag:
            wanted = slugify(tag)
            result = [r for r in result if wanted in {slugify(t) for t in r.tags}]
        if difficulty:
            result = [r for r in result if r.meta.difficulty == difficulty.lower()]
        return result

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view written as ``catalog.json``."""
        return {
            "count": len(self.recipes),
            "recipes": [r.summary() for r in self.recipes],
            "categories": {k: [r.slug for r in v] for k, v in self.by_category().items()},
            "tags": {k: [r.slug for r in v] for k, v in self.by_tag().items()},
            "difficulty": {k: [r.slug for r in v] for k, v in self.by_difficulty().items()},
        }
