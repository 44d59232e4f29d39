# tests/test_frontmatter.py

import pytest

from src.travel_content.frontmatter import (
    FrontMatter,
    FrontMatterError,
    parse_frontmatter,
    render_document,
    set_hero_image,
)


BLOCK_SCALAR_DOC = """---
title: "Best Rooftop Bars in Dubai"
description: 'Sip cocktails above the skyline'
city: Dubai
heroImage: >-
  https://images.unsplash.com/photo-1512453979798-5ea266f8880c?w=1200
  &h=675&fit=crop
category: Nightlife
tags:
  - bars
  - "rooftops"
---

# Best Rooftop Bars

Body text with heroImage: https://example.com/not-front-matter.jpg
---
More body.
"""

QUOTED_URL_DOC = """---
title: Desert Safari
heroImage: "https://images.unsplash.com/photo-123?w=1200"
pubDate: 2024-02-01
---
Body.
"""


# --- parsing ---------------------------------------------------------------------------


def test_parse_single_line_values_strip_quotes():
    fm = parse_frontmatter(BLOCK_SCALAR_DOC)
    assert fm["title"] == "Best Rooftop Bars in Dubai"
    assert fm["description"] == "Sip cocktails above the skyline"
    assert fm["city"] == "Dubai"
    assert fm["category"] == "Nightlife"


def test_parse_block_scalar_joins_continuation_lines():
    fm = parse_frontmatter(BLOCK_SCALAR_DOC)
    assert fm["heroImage"] == (
        "https://images.unsplash.com/photo-1512453979798-5ea266f8880c?w=1200 &h=675&fit=crop"
    )


def test_parse_list_values():
    fm = parse_frontmatter(BLOCK_SCALAR_DOC)
    assert fm["tags"] == ["bars", "rooftops"]


def test_parse_inline_list():
    fm = parse_frontmatter("---\ntags: [a, 'b']\nempty: []\n---\n")
    assert fm["tags"] == ["a", "b"]
    assert fm["empty"] == []


def test_parse_preserves_key_order():
    fm = FrontMatter.parse(BLOCK_SCALAR_DOC)
    assert fm.keys() == ["title", "description", "city", "heroImage", "category", "tags"]


def test_parse_without_front_matter():
    assert parse_frontmatter("# Just a heading\n") == {}
    with pytest.raises(FrontMatterError):
        FrontMatter.parse("# Just a heading\n")


def test_render_unchanged_document_is_identical():
    assert FrontMatter.parse(BLOCK_SCALAR_DOC).render() == BLOCK_SCALAR_DOC
    assert FrontMatter.parse(QUOTED_URL_DOC).render() == QUOTED_URL_DOC


# --- hero image rewrite ---------------------------------------------------------------------


def test_set_hero_image_replaces_block_scalar():
    updated = set_hero_image(BLOCK_SCALAR_DOC, "/images/dubai/rooftop-bars.jpg")

    fm = parse_frontmatter(updated)
    assert fm["heroImage"] == "/images/dubai/rooftop-bars.jpg"
    assert 'heroImage: "/images/dubai/rooftop-bars.jpg"\ncategory: Nightlife' in updated
    assert "unsplash" not in updated


def test_set_hero_image_preserves_other_fields_and_body_exactly():
    updated = set_hero_image(BLOCK_SCALAR_DOC, "/images/dubai/rooftop-bars.jpg")

    original_body = BLOCK_SCALAR_DOC.split("\n---\n", 1)[1]
    updated_body = updated.split("\n---\n", 1)[1]
    assert updated_body == original_body
    assert updated.startswith('---\ntitle: "Best Rooftop Bars in Dubai"\n')
    assert "tags:\n  - bars\n  - \"rooftops\"\n---" in updated


def test_set_hero_image_replaces_quoted_url():
    updated = set_hero_image(QUOTED_URL_DOC, "/images/dubai/desert-safari.jpg")
    assert updated == (
        "---\n"
        "title: Desert Safari\n"
        'heroImage: "/images/dubai/desert-safari.jpg"\n'
        "pubDate: 2024-02-01\n"
        "---\n"
        "Body.\n"
    )


def test_set_hero_image_appends_when_missing():
    doc = "---\ntitle: Tokyo Ramen\n---\nBody.\n"
    updated = set_hero_image(doc, "/images/tokyo/ramen.jpg")
    assert updated == '---\ntitle: Tokyo Ramen\nheroImage: "/images/tokyo/ramen.jpg"\n---\nBody.\n'


CRLF_DOC = '---\r\ntitle: "Dubai Guide"\r\nheroImage: "https://x.com/a.jpg"\r\n---\r\nBody\r\n'


def test_parse_crlf_document():
    assert parse_frontmatter(CRLF_DOC) == {
        "title": "Dubai Guide",
        "heroImage": "https://x.com/a.jpg",
    }


def test_set_hero_image_keeps_crlf_line_endings():
    updated = set_hero_image(CRLF_DOC, "/images/dubai/guide.jpg")
    assert updated == (
        '---\r\ntitle: "Dubai Guide"\r\nheroImage: "/images/dubai/guide.jpg"\r\n---\r\nBody\r\n'
    )


def test_set_hero_image_requires_front_matter():
    with pytest.raises(FrontMatterError):
        set_hero_image("no front matter here", "/images/x.jpg")


def test_set_escapes_quotes():
    fm = FrontMatter.parse('---\ntitle: old\n---\n')
    fm.set("title", 'Say "hello"')
    assert 'title: "Say \\"hello\\""' in fm.render()


# --- render_document ---------------------------------------------------------------------


def test_render_document_round_trips_fields():
    doc = render_document(
        {"title": "Louvre Guide", "city": "Paris", "featured": True, "readingTime": 7, "tags": ["art", "museums"]},
        "# Louvre\n\nText.\n",
    )
    fm = parse_frontmatter(doc)
    assert fm["title"] == "Louvre Guide"
    assert fm["featured"] == "true"
    assert fm["readingTime"] == "7"
    assert fm["tags"] == ["art", "museums"]
    assert doc.endswith("---\n\n# Louvre\n\nText.\n")
