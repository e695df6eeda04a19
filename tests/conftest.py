"""Shared test fixtures."""
import pytest

from krecipes.shared.config import SiteConfig

from samples import ADMISSION_WEBHOOKS, CSI_SNAPSHOTS, DRAFT, POD_SECURITY, write


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "src" / "content" / "recipes"
    write(root, "admission-webhooks.md", ADMISSION_WEBHOOKS)
    write(root, "pod-security.md", POD_SECURITY)
    write(root, "csi-snapshots.md", CSI_SNAPSHOTS)
    write(root, "unfinished.md", DRAFT)
    return root


@pytest.fixture
def config(tmp_path, content_dir):
    return SiteConfig(content_dir=content_dir, output_dir=tmp_path / "dist")
