"""
Tests for the hierarchical path codec.

Paths are ``depth/segment_1/.../segment_k``; the codec decodes them into a
depth, a leaf and the encoded paths of every ancestor, and computes the
facet prefix used to browse one level below a node.
"""

import pytest

from search_dimensions.domain.hierarchy_path import (
    ROOT_FACET_PREFIX,
    DecodedPath,
    child_facet_prefix,
    decode_path,
    encode_path,
    paths_for_segments,
    split_path,
)
from search_dimensions.exceptions import InvalidPathError


class TestDecodePath:
    """Decoding raw path strings."""

    def test_three_level_path(self):
        path = decode_path("2/A/A20/A23")
        assert path.depth == 2
        assert path.segments == ("A", "A20", "A23")
        assert path.leaf == "A23"

    def test_depth_only_is_root_placeholder(self):
        path = decode_path("3")
        assert path.depth == 3
        assert path.segments == ()
        assert path.leaf is None
        assert path.is_root

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_root_at_depth_zero(self, raw):
        assert decode_path(raw) == DecodedPath(depth=0)

    def test_trailing_separators_ignored(self):
        assert decode_path("1/A/B/").segments == ("A", "B")
        assert decode_path("0/").is_root

    def test_inner_empty_segments_kept(self):
        assert split_path("2/A//C") == ["2", "A", "", "C"]

    def test_whitespace_around_depth_tolerated(self):
        assert decode_path(" 1/A").depth == 1

    def test_non_string_input_decoded_as_text(self):
        assert decode_path(0).depth == 0

    @pytest.mark.parametrize("raw", ["abc/A", "x", "1.5/A", "/A", "-1/A", "١/A", "/", "//", " / "])
    def test_malformed_depth_raises(self, raw):
        with pytest.raises(InvalidPathError) as exc_info:
            decode_path(raw)
        assert exc_info.value.path == raw
        assert exc_info.value.code == "INVALID_PATH"


class TestAncestorPaths:
    """Ancestor reconstruction follows segment position, not the declared depth."""

    def test_ancestors_oldest_first(self):
        assert decode_path("2/A/A20/A23").ancestor_paths() == ["0/A", "1/A/A20"]

    def test_single_segment_has_no_ancestors(self):
        assert decode_path("0/A").ancestor_paths() == []

    def test_root_has_no_ancestors(self):
        assert decode_path("0").ancestor_paths() == []

    def test_ancestor_depth_follows_position_not_path_depth(self):
        # A non-canonical depth does not shift the ancestors: ancestor d is
        # always (d-1)/segments[:d].
        assert decode_path("7/A/B/C").ancestor_paths() == ["0/A", "1/A/B"]

    def test_separators_only_reports_missing_depth(self):
        with pytest.raises(InvalidPathError, match="no depth token"):
            decode_path("//")

    def test_empty_inner_segment_kept_in_ancestors(self):
        path = decode_path("2//B/C")
        assert path.segments == ("", "B", "C")
        assert path.ancestors() == [
            DecodedPath(depth=0, segments=("",)),
            DecodedPath(depth=1, segments=("", "B")),
        ]
        assert path.ancestor_paths() == ["0/", "1//B"]

    def test_ancestor_count_is_segments_minus_one(self):
        for k in range(1, 6):
            segments = [f"S{i}" for i in range(k)]
            assert len(decode_path(encode_path(k - 1, segments)).ancestor_paths()) == k - 1


class TestEncodePath:
    """Encoding and round trips."""

    def test_encode(self):
        assert encode_path(1, ["A", "B"]) == "1/A/B"

    def test_encode_root(self):
        assert encode_path(0, []) == "0"

    @pytest.mark.parametrize("raw", ["0/A", "1/A/B", "2/A/B/C", "1/A", "5/X"])
    def test_round_trip(self, raw):
        assert decode_path(raw).encode() == raw

    def test_paths_for_segments(self):
        assert paths_for_segments(["A", "A20", "A23"]) == ["0/A", "1/A/A20", "2/A/A20/A23"]

    def test_inner_empty_segment_round_trip(self):
        raw = encode_path(1, ["", "B"])
        assert raw == "1//B"
        assert decode_path(raw).encode() == raw

    def test_paths_for_no_segments(self):
        assert paths_for_segments([]) == []

    def test_built_paths_round_trip(self):
        for path in paths_for_segments(["B", "B20", "B21", "B24"]):
            assert decode_path(path).encode() == path


class TestChildFacetPrefix:
    """Facet prefix one level below a node."""

    def test_unselected_browses_from_top(self):
        assert child_facet_prefix(0, [], selected=False) == ROOT_FACET_PREFIX == "0/"

    def test_first_level_node(self):
        assert child_facet_prefix(1, ["A"]) == "2/A/"

    def test_canonical_node(self):
        assert child_facet_prefix(0, ["A"]) == "1/A/"
        assert child_facet_prefix(1, ["A", "A20"]) == "2/A/A20/"

    def test_selected_depth_without_segments(self):
        assert child_facet_prefix(3, []) == "4/"
