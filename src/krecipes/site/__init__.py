"""Static site build, sitemap, change watcher and preview service."""

from krecipes.site.builder import BuildResult, SiteBuilder
from krecipes.site.sitemap import SitemapEntry, render_sitemap
from krecipes.site.watcher import SiteWatcher

__all__ = [
    "BuildResult",
    "SiteBuilder",
    "SiteWatcher",
    "SitemapEntry",
    "render_sitemap",
]
