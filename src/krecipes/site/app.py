"""FastAPI preview service for the recipe site.

Endpoints:
- GET  /health                - service health and recipe count
- GET  /api/recipes           - recipe listing, filterable by category, tag, difficulty
- GET  /api/recipes/{slug}    - one recipe with rendered HTML and related slugs
- GET  /api/categories        - category names with recipe counts
- POST /api/reload            - reload content from disk

When the build output directory exists it is served as static HTML at ``/``.

Usage:
    krecipes serve --port 8000
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from krecipes.catalog.checks import run_checks
from krecipes.catalog.index import Catalog
from krecipes.render.markdown import render_markdown
from krecipes.shared.config import SiteConfig
from krecipes.site.builder import SiteBuilder

logger = logging.getLogger(__name__)


class RecipeSummary(BaseModel):
    slug: str
    url: str
    title: str
    description: str
    category: str
    difficulty: str
    tags: list[str]
    publishDate: str
    updatedDate: str | None = None
    author: str
    timeToComplete: str
    kubernetesVersion: str
    relatedRecipes: list[str] = Field(default_factory=list)


class RecipeDetail(RecipeSummary):
    html: str
    headings: list[dict[str, Any]]
    languages: list[str]
    reading_minutes: int
    related: list[str]


class HealthResponse(BaseModel):
    status: str = Field(..., description="'ready' or 'empty'")
    recipe_count: int
    issue_count: int
    loaded_at: float


class ReloadResponse(BaseModel):
    recipe_count: int
    issue_count: int
    elapsed_ms: float


class ContentState:
    """Catalog snapshot held by the running service."""

    def __init__(self, config: SiteConfig) -> None:
        self.builder = SiteBuilder(config)
        self.catalog = Catalog(recipes=[])
        self.issue_count = 0
        self.loaded_at = 0.0

    def reload(self) -> None:
        ctx, _ = self.builder.collect()
        self.catalog = ctx.catalog
        self.issue_count = len(run_checks(ctx))
        self.loaded_at = time.time()
        logger.info("[Service] Loaded %d recipes (%d issues)", len(self.catalog), self.issue_count)


def create_app(config: SiteConfig) -> FastAPI:
    state = ContentState(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("[Service] Starting with content_dir=%s", config.content_dir)
        state.reload()
        yield
        logger.info("[Service] Shutdown complete")

    app = FastAPI(
        title="Kubernetes Recipes preview",
        description="Catalog API and static preview of the recipe site",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.content = state

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ready" if len(state.catalog) else "empty",
            recipe_count=len(state.catalog),
            issue_count=state.issue_count,
            loaded_at=state.loaded_at,
        )

    @app.get("/api/recipes", response_model=list[RecipeSummary])
    async def list_recipes(
        category: str | None = Query(None),
        tag: str | None = Query(None),
        difficulty: str | None = Query(None),
    ) -> list[RecipeSummary]:
        recipes = state.catalog.filter(category=category, tag=tag, difficulty=difficulty)
        return [RecipeSummary(**r.summary()) for r in recipes]

    @app.get("/api/recipes/{slug:path}", response_model=RecipeDetail)
    async def get_recipe(slug: str) -> RecipeDetail:
        recipe = state.catalog.get(slug)
        if recipe is None:
            raise HTTPException(status_code=404, detail=f"Unknown recipe: {slug}")
        body = render_markdown(recipe.body)
        return RecipeDetail(
            **recipe.summary(),
            html=body.html,
            headings=[{"level": h.level, "text": h.text, "anchor": h.anchor} for h in body.headings],
            languages=body.languages,
            reading_minutes=body.reading_minutes,
            related=[r.slug for r in state.catalog.related(slug)],
        )

    @app.get("/api/categories")
    async def categories() -> dict[str, int]:
        return {name: len(items) for name, items in state.catalog.by_category().items()}

    @app.post("/api/reload", response_model=ReloadResponse)
    async def reload() -> ReloadResponse:
        start = time.time()
        state.reload()
        return ReloadResponse(
            recipe_count=len(state.catalog),
            issue_count=state.issue_count,
            elapsed_ms=(time.time() - start) * 1000,
        )

    if config.output_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(config.output_dir), html=True), name="site")
    else:
        logger.info("[Service] %s not built yet, static preview disabled", config.output_dir)

    return app
