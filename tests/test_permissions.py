"""Tests for permission parsing."""

import pytest

from credstore.permissions import format_permissions, parse_permissions


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("view,edit", ["view", "edit"]),
        (" view , edit ,", ["view", "edit"]),
        ("edit,,view", ["edit", "view"]),
        ("view,view", ["view", "view"]),
        ("read write", ["read write"]),
        ("admin", ["admin"]),
    ],
)
def test_parse_permissions(raw, expected):
    """Tokens are split on commas and stripped, order kept."""
    assert parse_permissions(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", ",", " , ,"])
def test_parse_permissions_falls_back_to_default(raw):
    """Text without tokens yields the default."""
    assert parse_permissions(raw) == ["view"]


def test_parse_permissions_custom_default():
    """A caller-supplied default is used and copied."""
    default = ["read"]
    result = parse_permissions("", default)
    assert result == ["read"]
    assert result is not default


def test_format_permissions():
    """Lists render back as comma-separated text."""
    assert format_permissions(["view", "edit"]) == "view, edit"
    assert format_permissions([]) == ""
