"""Integration tests for the static site build."""
import json

import pytest

from krecipes.errors import BuildError
from krecipes.site.builder import SiteBuilder

from samples import CSI_SNAPSHOTS, POD_SECURITY, write


def snapshot(root):
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*")) if p.is_file()
    }


def test_build_writes_site(config):
    result = SiteBuilder(config).build()
    out = config.output_dir
    assert len(result.catalog) == 3
    assert result.drafts_skipped == 1
    for rel in (
        "index.html",
        "recipes/index.html",
        "recipes/security/pod-security/index.html",
        "recipes/security/admission-webhooks/index.html",
        "recipes/storage/csi-snapshots/index.html",
        "recipes/security/index.html",
        "tags/index.html",
        "tags/admission-control/index.html",
        "difficulty/advanced/index.html",
        "catalog.json",
        "sitemap.xml",
    ):
        assert (out / rel).is_file(), rel
    assert not (out / "recipes" / "helm").exists()
    assert len(result.pages) == len(snapshot(out))


def test_recipe_page(config):
    SiteBuilder(config).build()
    html = (config.output_dir / "recipes/security/admission-webhooks/index.html").read_text()
    assert "<title>Admission Webhooks | Kubernetes Recipes</title>" in html
    assert 'class="language-yaml"' in html
    assert '<a href="#deploy-the-webhook">Deploy the webhook</a>' in html
    assert '<a href="/tags/admission-control/">#Admission Control</a>' in html
    assert '<a href="/recipes/security/pod-security/">Pod Security Standards</a>' in html
    assert "missing-recipe" not in html


def test_catalog_json(config):
    SiteBuilder(config).build()
    data = json.loads((config.output_dir / "catalog.json").read_text())
    assert data["count"] == 3
    assert [r["slug"] for r in data["recipes"]] == ["pod-security", "admission-webhooks", "csi-snapshots"]
    assert data["tags"]["admission-control"] == ["pod-security", "admission-webhooks"]
    assert data["recipes"][0]["updatedDate"] == "2024-06-01"


def test_sitemap_lists_recipes(config):
    SiteBuilder(config).build()
    xml = (config.output_dir / "sitemap.xml").read_text()
    assert "<loc>https://kubernetes.recipes/recipes/storage/csi-snapshots/</loc>" in xml
    assert "<lastmod>2024-06-01</lastmod>" in xml


def test_builds_are_reproducible(config, tmp_path):
    SiteBuilder(config).build()
    first = snapshot(config.output_dir)
    second_config = config.model_copy(update={"output_dir": tmp_path / "again"})
    SiteBuilder(second_config).build()
    assert snapshot(second_config.output_dir) == first


def test_drafts_included_on_request(config):
    config = config.model_copy(update={"include_drafts": True})
    result = SiteBuilder(config).build()
    assert result.drafts_skipped == 0
    assert (config.output_dir / "recipes/helm/unfinished/index.html").is_file()


def test_warnings_do_not_fail_default_build(config):
    result = SiteBuilder(config).build()
    assert [(i.check, i.slug) for i in result.issues] == [("broken-related", "admission-webhooks")]


def test_strict_build_fails_on_warning(config):
    config = config.model_copy(update={"strict": True})
    with pytest.raises(BuildError) as exc_info:
        SiteBuilder(config).build()
    assert len(exc_info.value.issues) == 1
    assert not config.output_dir.exists()


def test_malformed_recipe_fails_build(config):
    write(config.content_dir, "broken.md", "no front matter here\n")
    with pytest.raises(BuildError) as exc_info:
        SiteBuilder(config).build()
    assert exc_info.value.issues[0].check == "front-matter"


def test_clean_removes_stale_files(config):
    stale = config.output_dir / "old" / "index.html"
    write(config.output_dir, "old/index.html", "stale")
    SiteBuilder(config).build(clean=True)
    assert not stale.exists()
    assert (config.output_dir / "index.html").is_file()


def test_clean_refuses_content_parent(config):
    config = config.model_copy(update={"output_dir": config.content_dir.parent})
    with pytest.raises(BuildError, match="Refusing to clean"):
        SiteBuilder(config).build(clean=True)
    assert config.content_dir.is_dir()


def test_empty_content_builds_empty_site(tmp_path, config):
    config = config.model_copy(update={"content_dir": tmp_path / "empty"})
    result = SiteBuilder(config).build()
    assert len(result.catalog) == 0
    assert json.loads((config.output_dir / "catalog.json").read_text())["count"] == 0


def test_category_becomes_a_slug(config):
    text = POD_SECURITY.replace("category: security", "category: ../../Escaped Pipelines")
    write(config.content_dir, "evil.md", text.replace("Pod Security Standards", "Evil"))
    result = SiteBuilder(config).build()
    out = config.output_dir.resolve()
    assert all(out in page.resolve().parents for page in result.pages)
    assert (config.output_dir / "recipes/escaped-pipelines/evil/index.html").is_file()
    assert (config.output_dir / "recipes/escaped-pipelines/index.html").is_file()
    sitemap = (config.output_dir / "sitemap.xml").read_text()
    assert "<loc>https://kubernetes.recipes/recipes/escaped-pipelines/evil/</loc>" in sitemap
    page = (config.output_dir / "recipes/escaped-pipelines/evil/index.html").read_text()
    assert '<a href="/recipes/escaped-pipelines/">../../escaped pipelines</a>' in page


def test_tags_without_slug_are_not_linked(config):
    write(config.content_dir, "csi-snapshots.md", CSI_SNAPSHOTS.replace("tags: [backup]", "tags: [backup, '!!!']"))
    SiteBuilder(config).build()
    html = (config.output_dir / "recipes/storage/csi-snapshots/index.html").read_text()
    assert "/tags//" not in html
    assert '<a href="/tags/backup/">#backup</a>' in html


class TestRebuild:
    def test_deleted_recipe_pages_are_removed(self, config):
        SiteBuilder(config).build()
        stale = config.output_dir / "recipes/storage/csi-snapshots/index.html"
        assert stale.is_file()
        (config.content_dir / "csi-snapshots.md").unlink()
        SiteBuilder(config).build()
        assert not stale.exists()
        assert not (config.output_dir / "recipes/storage").exists()
        assert not (config.output_dir / "tags/backup").exists()
        assert (config.output_dir / "recipes/security/pod-security/index.html").is_file()

    def test_recipe_turned_draft_is_removed(self, config):
        SiteBuilder(config.model_copy(update={"include_drafts": True})).build()
        draft_page = config.output_dir / "recipes/helm/unfinished/index.html"
        assert draft_page.is_file()
        SiteBuilder(config).build()
        assert not draft_page.exists()

    def test_files_the_builder_did_not_write_survive(self, config):
        write(config.output_dir, "robots.txt", "User-agent: *\n")
        SiteBuilder(config).build()
        (config.content_dir / "csi-snapshots.md").unlink()
        SiteBuilder(config).build()
        assert (config.output_dir / "robots.txt").is_file()

    def test_manifest_lists_written_files(self, config):
        result = SiteBuilder(config).build()
        manifest = json.loads((config.output_dir / ".krecipes-manifest.json").read_text())
        assert "catalog.json" in manifest
        assert len(manifest) == len(result.pages) - 1
