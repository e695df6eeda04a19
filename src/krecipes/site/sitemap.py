"""sitemap.xml generation."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass(frozen=True)
class SitemapEntry:
    path: str  # site-relative, e.g. "recipes/storage/csi-snapshots/"
    lastmod: date | None = None


def render_sitemap(site_url: str, entries: list[SitemapEntry]) -> str:
    """Sitemap XML for ``entries``, sorted by URL so output is stable."""
    base = site_url.rstrip("/") + "/"
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for entry in sorted(entries, key=lambda e: e.path):
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = base + entry.path.lstrip("/")
        if entry.lastmod:
            ET.SubElement(url, "lastmod").text = entry.lastmod.isoformat()
    ET.indent(urlset)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(urlset, encoding="unicode") + "\n"
