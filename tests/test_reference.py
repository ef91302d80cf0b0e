"""Tests for image reference parsing and canonical rendering."""

import pytest

from talos_version_tags.exceptions import ParseError
from talos_version_tags.reference import (
    ImageReference,
    TrimOptions,
    canonicalize,
    clean_lines,
    parse_image_reference,
)

REFERENCE = "registry.example.com/acme/widget:v1.2.3@sha256:deadbeef"


def test_parse_full_reference():
    """Test parsing every part of a reference."""
    assert parse_image_reference(REFERENCE) == ImageReference(
        registry="registry.example.com",
        org="acme",
        repo="widget",
        tag="v1.2.3",
        shasum="deadbeef",
    )


def test_parse_reference_without_tag_or_digest():
    """Test that absent parts parse as empty strings."""
    ref = parse_image_reference("ghcr.io/siderolabs/gvisor")
    assert ref.tag == ""
    assert ref.shasum == ""

    ref = parse_image_reference("ghcr.io/siderolabs/gvisor@sha256:abc123")
    assert ref.tag == ""
    assert ref.shasum == "abc123"


def test_parse_reference_with_port_and_nested_org():
    """Test registry ports and multi-component organizations."""
    ref = parse_image_reference("localhost:5000/team/sub/app:1.0")
    assert ref.registry == "localhost:5000"
    assert ref.org == "team/sub"
    assert ref.repo == "app"
    assert ref.tag == "1.0"


def test_parse_strips_surrounding_whitespace():
    """Test that listing lines with trailing newlines still parse."""
    assert parse_image_reference(f"  {REFERENCE}\n").repo == "widget"


@pytest.mark.parametrize(
    "reference",
    ["", "widget", "acme/widget", "not a reference", "registry.example.com/acme/"],
)
def test_parse_malformed_reference(reference):
    """Test that references without registry/org/repo fail explicitly."""
    with pytest.raises(ParseError, match="Invalid image reference"):
        parse_image_reference(reference)


@pytest.mark.parametrize(
    "options, expected",
    [
        (TrimOptions(), REFERENCE),
        (TrimOptions(minimal=True), "acme/widget"),
        (TrimOptions(minimal=True, trim_registry=False, trim_tag=False), "acme/widget"),
        (TrimOptions(trim_registry=True, trim_sha256=True, trim_tag=True), "acme/widget"),
        (TrimOptions(trim_registry=True, trim_sha256=True), "acme/widget:v1.2.3"),
        (TrimOptions(trim_registry=True, trim_tag=True), "acme/widget@sha256:deadbeef"),
        (TrimOptions(trim_registry=True), "acme/widget:v1.2.3@sha256:deadbeef"),
        (
            TrimOptions(trim_sha256=True, trim_tag=True),
            "registry.example.com/acme/widget",
        ),
        (TrimOptions(trim_sha256=True), "registry.example.com/acme/widget:v1.2.3"),
        (
            TrimOptions(trim_tag=True),
            "registry.example.com/acme/widget@sha256:deadbeef",
        ),
    ],
)
def test_canonicalize_table(options, expected):
    """Test every reachable rendering."""
    assert canonicalize(REFERENCE, options) == expected


def test_canonicalize_keeps_empty_parts_literal():
    """Test that absent parts render as empty strings with their separators."""
    reference = "ghcr.io/siderolabs/gvisor:20231214.0"
    assert canonicalize(reference, TrimOptions()) == (
        "ghcr.io/siderolabs/gvisor:20231214.0@sha256:"
    )
    assert canonicalize("ghcr.io/siderolabs/gvisor", TrimOptions(trim_sha256=True)) == (
        "ghcr.io/siderolabs/gvisor:"
    )


def test_is_minimal():
    """Test the minimal short circuit."""
    assert TrimOptions(minimal=True).is_minimal
    assert TrimOptions(trim_registry=True, trim_sha256=True, trim_tag=True).is_minimal
    assert not TrimOptions(trim_registry=True, trim_sha256=True).is_minimal


def test_clean_lines_skips_blank_lines():
    """Test canonicalizing an image-digests listing."""
    lines = [
        "ghcr.io/siderolabs/gvisor:20231214.0-v1.6.0@sha256:548b2b",
        "",
        "ghcr.io/siderolabs/iscsi-tools:v0.1.4@sha256:a68c26",
        "   ",
    ]
    assert clean_lines(lines, TrimOptions(trim_sha256=True)) == [
        "ghcr.io/siderolabs/gvisor:20231214.0-v1.6.0",
        "ghcr.io/siderolabs/iscsi-tools:v0.1.4",
    ]


def test_clean_lines_fails_on_invalid_line():
    """Test that one malformed line fails the whole listing."""
    with pytest.raises(ParseError):
        clean_lines([REFERENCE, "garbage"], TrimOptions())
