"""Recipe document model.

A recipe is one Markdown file: front matter validated into
:class:`RecipeFrontMatter` plus the raw Markdown body. Identity is the slug,
derived from the file path relative to the content directory.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DIFFICULTIES = ("beginner", "intermediate", "advanced")

Difficulty = Literal["beginner", "intermediate", "advanced"]

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """URL slug for free text such as a tag: ``"Pod Security"`` -> ``"pod-security"``."""
    return _SLUG_STRIP.sub("-", text.lower()).strip("-")


def slug_for(path: Path, root: Path) -> str:
    """Slug of a content file: relative path, no suffix, POSIX separators, lower case."""
    rel = path.relative_to(root).with_suffix("")
    return rel.as_posix().lower()


class RecipeImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str
    alt: str = ""


class RecipeFrontMatter(BaseModel):
    """Validated front matter of a recipe.

    Attribute names are snake_case; the YAML keys are the camelCase aliases
    (``publishDate``, ``relatedRecipes`` ...). Unknown keys are kept.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    title: str
    description: str
    category: str
    difficulty: Difficulty = "intermediate"
    time_to_complete: str = Field("15 minutes", alias="timeToComplete")
    kubernetes_version: str = Field("1.28+", alias="kubernetesVersion")
    prerequisites: list[str] = Field(default_factory=list)
    related_recipes: list[str] = Field(default_factory=list, alias="relatedRecipes")
    tags: list[str] = Field(default_factory=list)
    publish_date: date = Field(alias="publishDate")
    updated_date: date | None = Field(None, alias="updatedDate")
    author: str = "Luca Berton"
    draft: bool = False
    image: RecipeImage | None = None

    @field_validator("category", "difficulty", mode="before")
    @classmethod
    def _normalise_keyword(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("category")
    @classmethod
    def _category_has_slug(cls, value: str) -> str:
        if not slugify(value):
            raise ValueError("category must contain letters or digits")
        return value

    @field_validator("title", "description", "time_to_complete", "kubernetes_version", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        # YAML turns unquoted 1.28 or 15 into numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("prerequisites", "related_recipes", "tags", mode="before")
    @classmethod
    def _as_string_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(v) for v in value if v is not None]
        return value

    @field_validator("publish_date", "updated_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            text = value.strip()
            try:
                return date.fromisoformat(text)
            except ValueError:
                pass
            try:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            except ValueError:
                raise ValueError(f"not an ISO date: {value!r}") from None
        return value


@dataclass(frozen=True)
class Recipe:
    slug: str
    path: Path
    meta: RecipeFrontMatter
    body: str

    @property
    def title(self) -> str:
        return self.meta.title

    @property
    def category(self) -> str:
        return self.meta.category

    @property
    def category_slug(self) -> str:
        return slugify(self.meta.category)

    @property
    def tags(self) -> list[str]:
        return self.meta.tags

    @property
    def last_modified(self) -> date:
        return self.meta.updated_date or self.meta.publish_date

    @property
    def url_path(self) -> str:
        """Site-relative URL, category slug first: ``recipes/<category>/<slug>/``."""
        return f"recipes/{self.category_slug}/{self.slug}/"

    def summary(self) -> dict[str, Any]:
        """Listing view of the recipe, JSON-ready."""
        return {
            "slug": self.slug,
            "url": "/" + self.url_path,
            "title": self.meta.title,
            "description": self.meta.description,
            "category": self.meta.category,
            "difficulty": self.meta.difficulty,
            "tags": list(self.meta.tags),
            "publishDate": self.meta.publish_date.isoformat(),
            "updatedDate": self.meta.updated_date.isoformat() if self.meta.updated_date else None,
            "author": self.meta.author,
            "timeToComplete": self.meta.time_to_complete,
            "kubernetesVersion": self.meta.kubernetes_version,
            "relatedRecipes": list(self.meta.related_recipes),
        }
