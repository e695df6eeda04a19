from datetime import date, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from krecipes.content.types import Recipe, RecipeFrontMatter, slug_for, slugify


def minimal(**extra):
    data = {
        "title": "Ingress basics",
        "description": "Route traffic",
        "category": "networking",
        "publishDate": "2024-01-15",
        "tags": ["ingress"],
    }
    data.update(extra)
    return data


class TestDefaults:
    def test_defaults_match_collection_schema(self):
        meta = RecipeFrontMatter.model_validate(minimal())
        assert meta.difficulty == "intermediate"
        assert meta.time_to_complete == "15 minutes"
        assert meta.kubernetes_version == "1.28+"
        assert meta.prerequisites == []
        assert meta.related_recipes == []
        assert meta.author == "Luca Berton"
        assert meta.draft is False
        assert meta.updated_date is None
        assert meta.image is None

    def test_camel_case_aliases(self):
        meta = RecipeFrontMatter.model_validate(minimal(
            timeToComplete="30 minutes",
            kubernetesVersion="1.29+",
            relatedRecipes=["tls"],
            updatedDate="2024-02-01",
        ))
        assert meta.time_to_complete == "30 minutes"
        assert meta.kubernetes_version == "1.29+"
        assert meta.related_recipes == ["tls"]
        assert meta.updated_date == date(2024, 2, 1)

    def test_tags_may_be_absent(self):
        data = minimal()
        del data["tags"]
        assert RecipeFrontMatter.model_validate(data).tags == []

    def test_unknown_keys_are_kept(self):
        meta = RecipeFrontMatter.model_validate(minimal(series="networking-101"))
        assert meta.model_extra == {"series": "networking-101"}

    def test_image(self):
        meta = RecipeFrontMatter.model_validate(minimal(image={"src": "/a.png", "alt": "diagram"}))
        assert meta.image.src == "/a.png"


class TestCoercion:
    def test_datetime_string(self):
        meta = RecipeFrontMatter.model_validate(minimal(publishDate="2024-01-15T09:30:00Z"))
        assert meta.publish_date == date(2024, 1, 15)

    def test_datetime_object(self):
        meta = RecipeFrontMatter.model_validate(minimal(publishDate=datetime(2024, 1, 15, 8, 0)))
        assert meta.publish_date == date(2024, 1, 15)

    def test_single_string_tag(self):
        assert RecipeFrontMatter.model_validate(minimal(tags="ingress")).tags == ["ingress"]

    def test_numeric_version(self):
        meta = RecipeFrontMatter.model_validate(minimal(kubernetesVersion=1.28))
        assert meta.kubernetes_version == "1.28"

    def test_category_and_difficulty_are_normalised(self):
        meta = RecipeFrontMatter.model_validate(minimal(category=" Networking ", difficulty="Advanced"))
        assert meta.category == "networking"
        assert meta.difficulty == "advanced"


class TestValidation:
    @pytest.mark.parametrize("field", ["title", "description", "category", "publishDate"])
    def test_required_fields(self, field):
        data = minimal()
        del data[field]
        with pytest.raises(ValidationError):
            RecipeFrontMatter.model_validate(data)

    def test_difficulty_enum(self):
        with pytest.raises(ValidationError):
            RecipeFrontMatter.model_validate(minimal(difficulty="expert"))

    def test_bad_date(self):
        with pytest.raises(ValidationError):
            RecipeFrontMatter.model_validate(minimal(publishDate="last tuesday"))

    @pytest.mark.parametrize("category", ["!!!", "../..", "日本語"])
    def test_category_needs_a_slug(self, category):
        with pytest.raises(ValidationError):
            RecipeFrontMatter.model_validate(minimal(category=category))


class TestRecipe:
    def test_url_path_uses_category(self):
        meta = RecipeFrontMatter.model_validate(minimal())
        recipe = Recipe(slug="ingress-basics", path=Path("x.md"), meta=meta, body="")
        assert recipe.url_path == "recipes/networking/ingress-basics/"

    @pytest.mark.parametrize("category,expected", [
        ("CI/CD Pipelines", "recipes/ci-cd-pipelines/a/"),
        ("../../escaped", "recipes/escaped/a/"),
    ])
    def test_url_path_slugifies_category(self, category, expected):
        meta = RecipeFrontMatter.model_validate(minimal(category=category))
        recipe = Recipe(slug="a", path=Path("a.md"), meta=meta, body="")
        assert recipe.url_path == expected
        assert recipe.category == category.lower()

    def test_last_modified_prefers_updated_date(self):
        meta = RecipeFrontMatter.model_validate(minimal(updatedDate="2024-03-01"))
        recipe = Recipe(slug="a", path=Path("a.md"), meta=meta, body="")
        assert recipe.last_modified == date(2024, 3, 1)

    def test_summary_is_json_ready(self):
        meta = RecipeFrontMatter.model_validate(minimal())
        summary = Recipe(slug="a", path=Path("a.md"), meta=meta, body="").summary()
        assert summary["publishDate"] == "2024-01-15"
        assert summary["url"] == "/recipes/networking/a/"
        assert summary["updatedDate"] is None


class TestSlugs:
    def test_slug_for_nested_path(self):
        root = Path("/content")
        assert slug_for(Path("/content/storage/CSI-Snapshots.md"), root) == "storage/csi-snapshots"

    @pytest.mark.parametrize("text,expected", [
        ("Pod Security", "pod-security"),
        ("  GitOps / Argo CD ", "gitops-argo-cd"),
        ("k8s_1.28", "k8s-1-28"),
    ])
    def test_slugify(self, text, expected):
        assert slugify(text) == expected
