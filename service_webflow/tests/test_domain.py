"""
Unit tests for Webflow domain helpers.
"""

import pytest
from datetime import datetime, timezone

from service_webflow.app.domain.analysis import OPTIONAL_TIP, REQUIRED_TIP, build_guidance, tip_for_field
from service_webflow.app.domain.authors import (
    fallback_authors,
    normalize_author,
    specialties_from_position,
    tov_from_bio,
)
from service_webflow.app.domain.publishing import (
    apply_transform,
    build_field_data,
    iso_timestamp,
    prepare_article,
    slugify,
)
from service_webflow.app.stores import DEFAULT_MAPPING
from shared.errors import ValidationError


class TestAnalysis:
    """Test cases for field guidance."""

    def test_known_slug_tips(self):
        assert tip_for_field("name").startswith("Brug en kort")
        assert tip_for_field("SEO-Title").startswith("Hold den under 60 tegn")

    def test_fallback_tips(self):
        assert tip_for_field("custom", required=True) == REQUIRED_TIP
        assert tip_for_field("custom") == OPTIONAL_TIP
        assert tip_for_field(None) == OPTIONAL_TIP

    def test_build_guidance(self):
        fields = [
            {"slug": "name", "type": "PlainText", "required": True},
            {"slug": "section", "type": "Reference"},
            {"slug": "unmapped", "type": "PlainText"},
        ]
        guidance = build_guidance(fields, DEFAULT_MAPPING)

        assert guidance[0] == {
            "slug": "name",
            "type": "PlainText",
            "required": True,
            "suggestedInternal": "title",
            "tip": tip_for_field("name"),
        }
        assert guidance[1]["suggestedInternal"] == "category"
        assert guidance[2]["suggestedInternal"] is None
        assert guidance[2]["tip"] == OPTIONAL_TIP


class TestAuthors:
    """Test cases for author normalization."""

    def test_tov_from_bio(self):
        assert tov_from_bio(None) == "Apropos stil"
        assert tov_from_bio("Analytisk og med HUMOR") == "Apropos stil, analytisk, humoristisk"

    def test_specialties_from_position(self):
        assert specialties_from_position(None) == ["Generel"]
        assert specialties_from_position("Filmanmelder") == ["Anmeldelser", "Film"]
        assert specialties_from_position("Praktikant") == ["Generel"]

    def test_normalize_author(self):
        item = {
            "id": "a1",
            "fieldData": {
                "name": "Ida",
                "slug": "ida",
                "bio": "Nysgerrig skribent",
                "photo": {"url": "https://cdn/ida.jpg"},
                "e-mail": "ida@example.com",
                "twitter": "@ida",
                "position": "Kulturredaktør",
            },
        }
        author = normalize_author(item)

        assert author["avatar"] == "https://cdn/ida.jpg"
        assert author["email"] == "ida@example.com"
        assert author["social"] == {"twitter": "@ida", "instagram": None, "linkedin": None}
        assert author["tov"] == "Apropos stil, nysgerrig"
        assert author["specialties"] == ["Kultur", "Redaktion"]

    def test_normalize_author_explicit_values(self):
        item = {"id": "a2", "fieldData": {"toneOfVoice": "Tør", "specialties": ["Gaming"]}}
        author = normalize_author(item)

        assert author["name"] == "Unknown Author"
        assert author["slug"] == "a2"
        assert author["tov"] == "Tør"
        assert author["specialties"] == ["Gaming"]

    def test_fallback_authors_are_copies(self):
        authors = fallback_authors()
        assert [a["id"] for a in authors] == ["frederik-kragh", "martin-kongstad", "casper-christensen"]

        authors[0]["specialties"].append("X")
        assert "X" not in fallback_authors()[0]["specialties"]


class TestTransforms:
    """Test cases for publishing transforms."""

    def test_plain_to_html(self):
        assert apply_transform("plainToHtml", "Første\nlinje\n\nAndet <afsnit>") == (
            "<p>Første<br>linje</p><p>Andet &lt;afsnit&gt;</p>"
        )

    def test_plain_to_html_keeps_html(self):
        assert apply_transform("plainToHtml", "<p>Allerede HTML</p>") == "<p>Allerede HTML</p>"

    def test_markdown_to_html(self):
        result = apply_transform("markdownToHtml", "## Titel\n\n**fed** tekst")
        assert "<h2>Titel</h2>" in result
        assert "<strong>fed</strong>" in result

    def test_string_array(self):
        assert apply_transform("stringArray", "film, musik ,,") == ["film", "musik"]
        assert apply_transform("stringArray", ["a", "", None, 3]) == ["a", "3"]

    def test_date_iso(self):
        assert apply_transform("dateIso", "2024-05-01") == "2024-05-01T00:00:00.000Z"
        assert apply_transform("dateIso", "2024-05-01T12:30:00+02:00") == "2024-05-01T10:30:00.000Z"
        assert apply_transform("dateIso", "2024-05-01T10:30:00.250Z") == "2024-05-01T10:30:00.250Z"
        assert apply_transform("dateIso", "not a date") is None

    def test_reference_id(self):
        assert apply_transform("referenceId", {"id": "a1", "name": "Ida"}) == "a1"
        assert apply_transform("referenceId", "a2") == "a2"
        assert apply_transform("referenceId", "") is None

    def test_boolean(self):
        assert apply_transform("boolean", "true") is True
        assert apply_transform("boolean", "Ja") is True
        assert apply_transform("boolean", "false") is False
        assert apply_transform("boolean", 0) is False

    def test_number(self):
        assert apply_transform("number", "4") == 4
        assert apply_transform("number", "4,5") == 4.5
        assert apply_transform("number", 3) == 3
        assert apply_transform("number", "many") is None

    def test_number_rejects_non_finite(self):
        assert apply_transform("number", "nan") is None
        assert apply_transform("number", "inf") is None
        assert apply_transform("number", float("-inf")) is None

    def test_clean_intro(self):
        assert apply_transform("cleanIntro", "<p>Intro: “En  god\nstart”</p>") == "En god start"

    def test_unknown_transform_is_identity(self):
        assert apply_transform("shout", "hej") == "hej"
        assert apply_transform(None, "hej") == "hej"


class TestPublishing:
    """Test cases for article preparation and field mapping."""

    @pytest.fixture
    def article(self):
        return {
            "title": "Årets bedste film: Dune!",
            "content": "En to tre fire fem",
            "excerpt": "Kort teaser",
            "tags": "film, sci-fi",
            "author": {"id": "author-1"},
            "rating": "5",
            "featured": "true",
        }

    def test_slugify(self):
        assert slugify("Årets bedste film: Dune!") == "rets-bedste-film-dune"
        assert slugify("  Hello   World  ") == "hello-world"

    def test_iso_timestamp_naive_is_utc(self):
        assert iso_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678000)) == "2024-01-02T03:04:05.678Z"

    def test_prepare_article(self, article):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        prepared = prepare_article(article, now=now)

        assert prepared["slug"] == "rets-bedste-film-dune"
        assert prepared["publishDate"] == "2024-05-01T12:00:00.000Z"
        assert prepared["status"] == "draft"
        assert prepared["wordCount"] == 5
        assert prepared["readTime"] == 1
        assert prepared["seoTitle"] == article["title"]
        assert prepared["seoDescription"] == "Kort teaser"
        assert "slug" not in article

    def test_prepare_article_read_time_rounds_up(self, article):
        article["content"] = " ".join(["ord"] * 401)
        assert prepare_article(article)["readTime"] == 3

    def test_prepare_article_keeps_given_values(self, article):
        article.update(slug="egen-slug", status="published", publishDate="2024-01-01T00:00:00.000Z")
        prepared = prepare_article(article)

        assert prepared["slug"] == "egen-slug"
        assert prepared["status"] == "published"
        assert prepared["publishDate"] == "2024-01-01T00:00:00.000Z"

    @pytest.mark.parametrize("payload", [
        {"title": "Kun titel"},
        {"content": "Kun indhold"},
        {"title": "", "content": "x"},
    ])
    def test_prepare_article_requires_title_and_content(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            prepare_article(payload)
        assert exc_info.value.message == "Title and content are required"

    def test_build_field_data(self, article):
        field_data, missing = build_field_data(prepare_article(article), DEFAULT_MAPPING)

        assert field_data["name"] == article["title"]
        assert field_data["slug"] == "rets-bedste-film-dune"
        assert field_data["content"] == "<p>En to tre fire fem</p>"
        assert field_data["tags"] == ["film", "sci-fi"]
        assert field_data["author"] == "author-1"
        assert field_data["stjerne"] == 5
        assert field_data["featured"] is True
        assert field_data["minutes-to-read"] == 1
        assert field_data["word-count"] == 5
        assert "section" not in field_data
        assert missing == []

    def test_first_non_empty_value_wins(self):
        mapping = {"entries": [
            {"internal": "category", "webflowSlug": "section"},
            {"internal": "section", "webflowSlug": "section"},
        ]}
        field_data, _ = build_field_data({"category": "", "section": "film"}, mapping)
        assert field_data == {"section": "film"}

        field_data, _ = build_field_data({"category": "kultur", "section": "film"}, mapping)
        assert field_data == {"section": "kultur"}

    def test_missing_required_slugs(self):
        mapping = {"entries": [
            {"internal": "title", "webflowSlug": "name", "required": True},
            {"internal": "seoDescription", "webflowSlug": "meta-description", "required": True},
        ]}
        field_data, missing = build_field_data({"title": "T"}, mapping)

        assert field_data == {"name": "T"}
        assert missing == ["meta-description"]
