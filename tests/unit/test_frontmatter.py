from datetime import date

import pytest

from krecipes.content.frontmatter import dump_front_matter, parse_front_matter, split_front_matter
from krecipes.errors import ContentError, MalformedFrontMatter

from samples import ADMISSION_WEBHOOKS, CSI_SNAPSHOTS, POD_SECURITY


class TestSplitFrontMatter:
    def test_splits_yaml_and_body(self):
        yaml_text, body = split_front_matter("---\ntitle: A\n---\n# Body\n")
        assert yaml_text == "title: A\n"
        assert body == "# Body\n"

    def test_missing_opening_delimiter(self):
        with pytest.raises(MalformedFrontMatter) as exc_info:
            split_front_matter("title: A\n---\nbody")
        assert "opening" in str(exc_info.value)

    def test_missing_closing_delimiter(self):
        with pytest.raises(MalformedFrontMatter) as exc_info:
            split_front_matter("---\ntitle: A\nbody without end")
        assert "closing" in str(exc_info.value)

    def test_empty_text(self):
        with pytest.raises(MalformedFrontMatter):
            split_front_matter("")

    def test_opening_must_be_first_line(self):
        with pytest.raises(MalformedFrontMatter):
            split_front_matter("\n---\ntitle: A\n---\n")

    def test_tolerates_bom_and_trailing_spaces(self):
        yaml_text, body = split_front_matter("\ufeff---  \ntitle: A\n---\t\nbody")
        assert yaml_text == "title: A\n"
        assert body == "body"

    def test_crlf_line_endings(self):
        yaml_text, body = split_front_matter("---\r\ntitle: A\r\n---\r\nbody\r\n")
        assert yaml_text == "title: A\r\n"
        assert body == "body\r\n"

    def test_horizontal_rule_in_body_is_kept(self):
        _, body = split_front_matter("---\ntitle: A\n---\nintro\n\n---\n\nmore\n")
        assert body == "intro\n\n---\n\nmore\n"

    def test_error_carries_path(self):
        with pytest.raises(MalformedFrontMatter) as exc_info:
            split_front_matter("no front matter", path="recipes/x.md")
        assert str(exc_info.value.path) == "recipes/x.md"
        assert isinstance(exc_info.value, ContentError)


class TestParseFrontMatter:
    def test_scalars_and_sequences(self):
        data, body = parse_front_matter(ADMISSION_WEBHOOKS)
        assert data["title"] == "Admission Webhooks"
        assert data["tags"] == ["webhooks", "Admission Control"]
        assert data["publishDate"] == "2024-03-10"
        assert body.startswith("\n# Admission Webhooks")

    def test_unquoted_date_becomes_date(self):
        data, _ = parse_front_matter(POD_SECURITY)
        assert data["publishDate"] == date(2024, 5, 1)

    def test_empty_block_is_empty_mapping(self):
        data, body = parse_front_matter("---\n---\nbody")
        assert data == {}
        assert body == "body"

    def test_invalid_yaml(self):
        with pytest.raises(MalformedFrontMatter) as exc_info:
            parse_front_matter("---\ntitle: [unclosed\n---\nbody")
        assert "not valid YAML" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_non_mapping_root(self):
        with pytest.raises(MalformedFrontMatter) as exc_info:
            parse_front_matter("---\n- a\n- b\n---\nbody")
        assert "mapping" in str(exc_info.value)


class TestDumpFrontMatter:
    @pytest.mark.parametrize("text", [ADMISSION_WEBHOOKS, POD_SECURITY, CSI_SNAPSHOTS])
    def test_parse_dump_parse_round_trips(self, text):
        data, body = parse_front_matter(text)
        again_data, again_body = parse_front_matter(dump_front_matter(data, body))
        assert again_data == data
        assert again_body == body

    def test_preserves_key_order(self):
        text = dump_front_matter({"title": "T", "category": "helm", "author": "A"}, "")
        lines = text.splitlines()
        assert lines[1:4] == ["title: T", "category: helm", "author: A"]

    def test_empty_mapping(self):
        assert dump_front_matter({}, "body") == "---\n---\nbody"

    def test_values_that_look_like_numbers_stay_strings(self):
        data = {"kubernetesVersion": "1.28", "timeToComplete": "15"}
        again, _ = parse_front_matter(dump_front_matter(data, ""))
        assert again == data
