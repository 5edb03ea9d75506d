# tests/test_utils.py
"""Tests for the shared helpers."""

import re

import pytest
from beanie import PydanticObjectId

from blog_api.utils import (
    add_filter_if_not_none,
    create_search_filter,
    parse_object_id,
    slugify,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello World!", "hello-world"),
        ("Tech", "tech"),
        ("  Leading and trailing  ", "leading-and-trailing"),
        ("C++ & Rust: 2024 edition", "c-rust-2024-edition"),
        ("already-a-slug", "already-a-slug"),
        ("!!!", ""),
        ("Привет мир", "привет-мир"),
        ("snake_case_title", "snake-case-title"),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


@pytest.mark.parametrize("text", ["Hello World!", "Ünïcode Title", "a--b__c", "Привет мир"])
def test_slugify_is_idempotent(text):
    slug = slugify(text)
    assert slugify(slug) == slug
    assert re.fullmatch(r"([^\W_]+(-[^\W_]+)*)?", slug)
    assert slug == slug.lower()


def test_parse_object_id():
    object_id = PydanticObjectId()

    assert parse_object_id(str(object_id)) == object_id
    assert parse_object_id(object_id) is object_id
    assert parse_object_id("nope") is None
    assert parse_object_id(None) is None


def test_create_search_filter():
    search = create_search_filter("  a.b  ", ["title", "content"])

    assert search == {
        "$or": [
            {"title": {"$regex": r"a\.b", "$options": "i"}},
            {"content": {"$regex": r"a\.b", "$options": "i"}},
        ]
    }
    assert create_search_filter("   ", ["title"]) is None
    assert create_search_filter(None, ["title"]) is None


def test_add_filter_if_not_none():
    filters = {}
    add_filter_if_not_none(filters, "category", None)
    add_filter_if_not_none(filters, "status", "draft")

    assert filters == {"status": "draft"}
