"""Integration tests for the preview service."""
import pytest
from fastapi.testclient import TestClient

from krecipes.site.app import create_app
from krecipes.site.builder import SiteBuilder

from samples import POD_SECURITY, write


@pytest.fixture
def client(config):
    with TestClient(create_app(config)) as client:
        yield client


def test_health(client):
    data = client.get("/health").json()
    assert data["status"] == "ready"
    assert data["recipe_count"] == 3
    assert data["issue_count"] == 1


def test_list_recipes(client):
    response = client.get("/api/recipes")
    assert response.status_code == 200
    assert [r["slug"] for r in response.json()] == ["pod-security", "admission-webhooks", "csi-snapshots"]


def test_list_filters(client):
    assert [r["slug"] for r in client.get("/api/recipes", params={"category": "storage"}).json()] == [
        "csi-snapshots"
    ]
    assert [r["slug"] for r in client.get("/api/recipes", params={"difficulty": "advanced"}).json()] == [
        "admission-webhooks"
    ]


def test_recipe_detail(client):
    data = client.get("/api/recipes/admission-webhooks").json()
    assert data["title"] == "Admission Webhooks"
    assert data["languages"] == ["yaml", "go"]
    assert data["related"] == ["pod-security"]
    assert data["relatedRecipes"] == ["pod-security", "missing-recipe"]
    assert data["headings"][1]["anchor"] == "deploy-the-webhook"
    assert "<blockquote>" in data["html"]


def test_unknown_recipe(client):
    response = client.get("/api/recipes/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Unknown recipe: nope"


def test_categories(client):
    assert client.get("/api/categories").json() == {"security": 2, "storage": 1}


def test_reload_picks_up_new_content(client, config):
    write(config.content_dir, "more/pod-security-2.md", POD_SECURITY.replace("Pod Security Standards", "PSS again"))
    data = client.post("/api/reload").json()
    assert data["recipe_count"] == 4
    assert client.get("/api/recipes/more/pod-security-2").json()["title"] == "PSS again"


def test_empty_content(config, tmp_path):
    config = config.model_copy(update={"content_dir": tmp_path / "none"})
    with TestClient(create_app(config)) as client:
        assert client.get("/health").json()["status"] == "empty"


def test_serves_built_site(config):
    SiteBuilder(config).build()
    with TestClient(create_app(config)) as client:
        response = client.get("/recipes/storage/csi-snapshots/")
        assert response.status_code == 200
        assert "Volume Snapshots" in response.text
        assert client.get("/health").status_code == 200
