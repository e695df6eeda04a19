"""Recipe content: front matter parsing, document model and on-disk store."""

from krecipes.content.frontmatter import dump_front_matter, parse_front_matter, split_front_matter
from krecipes.content.store import ContentStore, LoadFailure, LoadResult
from krecipes.content.types import (
    DIFFICULTIES,
    Recipe,
    RecipeFrontMatter,
    RecipeImage,
    slug_for,
    slugify,
)

__all__ = [
    "ContentStore",
    "DIFFICULTIES",
    "LoadFailure",
    "LoadResult",
    "Recipe",
    "RecipeFrontMatter",
    "RecipeImage",
    "dump_front_matter",
    "parse_front_matter",
    "slug_for",
    "slugify",
    "split_front_matter",
]
