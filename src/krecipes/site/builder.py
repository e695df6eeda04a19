"""Static site build: content store → renderer → catalog → files on disk.

A build is a single pass:

1. load every recipe (per-file failures are collected, not fatal)
2. drop drafts unless ``include_drafts`` is set
3. build the catalog and run the content checks
4. stop with :class:`BuildError` if the checks fail (errors, or anything in strict mode)
5. render recipe and listing pages, ``catalog.json`` and ``sitemap.xml``
6. delete pages the previous build wrote that are no longer produced

Nothing time-dependent is written, so building the same content twice gives
byte-identical output.
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from krecipes.catalog.checks import CheckContext, Issue, has_failures, run_checks
from krecipes.catalog.index import Catalog
from krecipes.content.store import ContentStore
from krecipes.content.types import Recipe
from krecipes.errors import BuildError
from krecipes.render.markdown import RenderedBody, render_markdown
from krecipes.render.templates import PageRenderer
from krecipes.shared.config import SiteConfig
from krecipes.site.sitemap import SitemapEntry, render_sitemap

logger = logging.getLogger(__name__)

LATEST_ON_HOME = 10
MANIFEST_NAME = ".krecipes-manifest.json"


@dataclass
class BuildResult:
    output_dir: Path
    catalog: Catalog
    issues: list[Issue] = field(default_factory=list)
    pages: list[Path] = field(default_factory=list)
    drafts_skipped: int = 0


class SiteBuilder:
    """Builds the static site described by a :class:`SiteConfig`.

    Args:
        config: Content and output directories, site identity and check settings.
    """

    def __init__(self, config: SiteConfig) -> None:
        self.config = config
        self.store = ContentStore(config.content_dir, default_author=config.default_author)
        self.pages = PageRenderer(config.site_title, config.site_url)

    def collect(self) -> tuple[CheckContext, int]:
        """Load content and build the catalog; returns the check context and drafts skipped."""
        loaded = self.store.load_all()
        recipes = loaded.recipes
        drafts = 0
        if not self.config.include_drafts:
            published = [r for r in recipes if not r.meta.draft]
            drafts = len(recipes) - len(published)
            recipes = published
            if drafts:
                logger.info("Skipping %d draft recipe(s)", drafts)
        catalog = Catalog.build(recipes)
        ctx = CheckContext(
            recipes=recipes,
            failures=loaded.failures,
            catalog=catalog,
            config=self.config,
        )
        return ctx, drafts

    def check(self) -> list[Issue]:
        ctx, _ = self.collect()
        return run_checks(ctx)

    def build(self, clean: bool = False) -> BuildResult:
        """Build the site into ``config.output_dir``.

        Raises:
            BuildError: When checks fail, or ``clean`` would delete the content.
        """
        ctx, drafts = self.collect()
        issues = run_checks(ctx)
        for issue in issues:
            log = logger.error if issue.severity == "error" else logger.warning
            log("%s", issue)
        if has_failures(issues, strict=self.config.strict):
            raise BuildError(f"Build aborted: {len(issues)} content issue(s)", issues)

        out = self.config.output_dir
        if clean:
            self._clean(out)
        out.mkdir(parents=True, exist_ok=True)

        result = BuildResult(output_dir=out, catalog=ctx.catalog, issues=issues, drafts_skipped=drafts)
        self._write_site(ctx.catalog, result)
        self._prune(result)
        logger.info("Wrote %d files to %s", len(result.pages), out)
        return result

    def _clean(self, out: Path) -> None:
        resolved = out.resolve()
        content = self.config.content_dir.resolve()
        if resolved == Path.cwd().resolve() or resolved == content or resolved in content.parents:
            raise BuildError(f"Refusing to clean {out}: it contains the working tree or content")
        if out.exists():
            shutil.rmtree(out)

    def _prune(self, result: BuildResult) -> None:
        """Delete files the previous build wrote that this build did not, then record the new manifest.

        Only paths listed in the previous manifest are touched, so files the
        builder never wrote survive.
        """
        out = result.output_dir
        manifest = out / MANIFEST_NAME
        written = sorted(p.relative_to(out).as_posix() for p in result.pages)
        if manifest.is_file():
            try:
                previous = json.loads(manifest.read_text(encoding="utf-8"))
            except ValueError:
                logger.warning("Ignoring unreadable manifest %s", manifest)
                previous = []
            root = out.resolve()
            for rel in sorted(set(previous) - set(written)):
                stale = (out / rel).resolve()
                if root not in stale.parents or not stale.is_file():
                    continue
                stale.unlink()
                logger.info("Removed stale %s", rel)
                parent = stale.parent
                while parent != root and not any(parent.iterdir()):
                    parent.rmdir()
                    parent = parent.parent
        self._write(result, MANIFEST_NAME, json.dumps(written, indent=2) + "\n")

    def _write(self, result: BuildResult, rel_path: str, content: str) -> None:
        target = result.output_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        result.pages.append(target)

    def _listing(self, result: BuildResult, url_dir: str, heading: str,
                 recipes: list[Recipe], groups: list[tuple[str, str, int]] | None = None) -> None:
        html = self.pages.render(
            "listing.html", "/" + url_dir,
            heading=heading, recipes=recipes, groups=groups or [],
        )
        self._write(result, url_dir + "index.html", html)

    def _write_site(self, catalog: Catalog, result: BuildResult) -> None:
        sitemap: list[SitemapEntry] = []
        by_category = catalog.by_category()
        category_labels = catalog.category_labels()
        category_groups = [
            (f"/recipes/{slug}/", category_labels[slug], len(items)) for slug, items in by_category.items()
        ]

        self._listing(result, "", self.config.site_title,
                      catalog.recipes[:LATEST_ON_HOME], category_groups)
        self._listing(result, "recipes/", "All recipes", catalog.recipes, category_groups)
        sitemap += [SitemapEntry(""), SitemapEntry("recipes/")]

        for recipe in catalog:
            body = render_markdown(recipe.body)
            self._write_recipe(result, recipe, body, catalog.related(recipe.slug))
            sitemap.append(SitemapEntry(recipe.url_path, recipe.last_modified))

        for slug, items in by_category.items():
            self._listing(result, f"recipes/{slug}/", f"{category_labels[slug].title()} recipes", items)
            sitemap.append(SitemapEntry(f"recipes/{slug}/"))

        labels = catalog.tag_labels()
        by_tag = catalog.by_tag()
        tag_groups = [(f"/tags/{slug}/", labels[slug], len(items)) for slug, items in by_tag.items()]
        self._listing(result, "tags/", "Tags", [], tag_groups)
        sitemap.append(SitemapEntry("tags/"))
        for slug, items in by_tag.items():
            self._listing(result, f"tags/{slug}/", f"Recipes tagged {labels[slug]}", items)
            sitemap.append(SitemapEntry(f"tags/{slug}/"))

        for level, items in catalog.by_difficulty().items():
            self._listing(result, f"difficulty/{level}/", f"{level.title()} recipes", items)
            sitemap.append(SitemapEntry(f"difficulty/{level}/"))

        self._write(result, "catalog.json",
                    json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False) + "\n")
        self._write(result, "sitemap.xml", render_sitemap(self.config.site_url, sitemap))

    def _write_recipe(self, result: BuildResult, recipe: Recipe, body: RenderedBody,
                      related: list[Recipe]) -> None:
        html = self.pages.render(
            "recipe.html", "/" + recipe.url_path,
            recipe=recipe, body=body, related=related,
        )
        self._write(result, recipe.url_path + "index.html", html)
