"""
Hierarchical path codec.

Responsibility:
    Encodes positions in a tree (category taxonomies and the like) as
    depth-prefixed, slash-delimited strings and decodes them back, including
    the ancestor chain and the facet prefix used to browse one level down.

Architecture position:
    Core > Domain -- pure functions, zero I/O. Used by HierarchicalValue.

Encoding:
    ``depth/segment_1/.../segment_k``. Paths built here use ``depth = k - 1``
    (``0/A``, ``1/A/B``, ``2/A/B/C``) so that every document indexed with the
    paths of all its prefixes can be faceted one level at a time with the
    prefix ``depth/segments.../``. A bare depth (``0``) is the root
    placeholder: no leaf, no ancestors.

Invariants enforced:
    - encode_path(decode_path(p)) == p for every path built by encode_path
      or paths_for_segments whose last segment is non-empty. Inner empty
      segments are kept; trailing separators are dropped when decoding.
    - A path with k segments has k - 1 ancestors. Ancestor d (1-based) is
      ``(d-1)/segment_1/.../segment_d``; the leaf itself is not an ancestor.
      Stored facet values use this indexing.

Failure modes:
    - InvalidPathError when the depth token is missing or is not a
      non-negative integer.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from search_dimensions.exceptions import InvalidPathError

SEPARATOR = "/"
ROOT_FACET_PREFIX = "0/"

_DEPTH_PATTERN = re.compile(r"\s*(\d+)\s*", re.ASCII)


@dataclass(frozen=True, slots=True)
class DecodedPath:
    """Depth plus the segments that follow it."""

    depth: int
    segments: tuple[str, ...] = ()

    @property
    def leaf(self) -> str | None:
        return self.segments[-1] if self.segments else None

    @property
    def is_root(self) -> bool:
        return not self.segments

    def ancestors(self) -> list[DecodedPath]:
        """Every ancestor, oldest first, keeping empty segments intact."""
        return [
            DecodedPath(depth=depth - 1, segments=self.segments[:depth])
            for depth in range(1, len(self.segments))
        ]

    def ancestor_paths(self) -> list[str]:
        """Encoded path of every ancestor, oldest first."""
        return [ancestor.encode() for ancestor in self.ancestors()]

    def encode(self) -> str:
        return encode_path(self.depth, self.segments)


def split_path(raw: str) -> list[str]:
    """Split on the separator, dropping trailing empty tokens."""
    tokens = raw.split(SEPARATOR)
    while tokens and tokens[-1] == "":
        tokens.pop()
    return tokens


def parse_depth(token: str, raw: str) -> int:
    match = _DEPTH_PATTERN.fullmatch(token)
    if match is None:
        raise InvalidPathError(raw, f"depth {token!r} is not a non-negative integer")
    return int(match.group(1))


def decode_path(raw: str | None) -> DecodedPath:
    """
    Decode a raw path into depth and segments.

    Blank input decodes to the root placeholder at depth 0.
    """
    if raw is None or not str(raw).strip():
        return DecodedPath(depth=0)

    raw = str(raw)
    tokens = split_path(raw)
    if not tokens:
        raise InvalidPathError(raw, "no depth token")
    depth = parse_depth(tokens[0], raw)
    return DecodedPath(depth=depth, segments=tuple(tokens[1:]))


def encode_path(depth: int, segments: Sequence[str]) -> str:
    return SEPARATOR.join([str(depth), *segments])


def paths_for_segments(segments: Sequence[str]) -> list[str]:
    """
    Encoded path for each prefix of ``segments``.

    ``["A", "B", "C"]`` gives ``["0/A", "1/A/B", "2/A/B/C"]``: the values to
    index on a document so every level of its branch can be faceted.
    """
    return [
        encode_path(index, segments[: index + 1])
        for index in range(len(segments))
    ]


def child_facet_prefix(depth: int, segments: Sequence[str], *, selected: bool = True) -> str:
    """Facet prefix matching the direct children of the given node.

    An unselected node browses from the top of the tree.
    """
    if not selected:
        return ROOT_FACET_PREFIX
    return encode_path(depth + 1, segments) + SEPARATOR
