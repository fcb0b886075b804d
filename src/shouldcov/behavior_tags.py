"""
Behavior-tag parsing for docstrings.

A method docstring may carry one or more ``@should <description>`` tags. Each
tag describes one expected unit test. This module finds those tags in the raw
docstring text and reports the exact source range of every description so
that findings underline only the human-written part.

shouldcov/src/shouldcov/behavior_tags.py
"""

import re
from dataclasses import dataclass
from typing import List, Optional

__all__ = [
    "SHOULD_TAG",
    "TextRange",
    "DocComment",
    "BehaviorSpecification",
    "parse_behavior_tags",
    "has_behavior_tags",
]

SHOULD_TAG = "@should"

# Anything that starts a new docstring section ends the current @should fragment:
# another @tag, a reST field list entry, or a Google/NumPy style section header.
_MARKER_PATTERN = re.compile(
    r"^[ \t]*(?:"
    r"(?P<tag>@[A-Za-z][\w-]*)"
    r"|:[A-Za-z][^:\n]*:"
    r"|(?:Args|Arguments|Attributes|Examples?|Keyword Args|Methods|Notes?|Other Parameters"
    r"|Parameters|Raises|References|Returns|See Also|Todo|Warns?|Warnings|Yields):[ \t]*$"
    r")",
    re.MULTILINE,
)


@dataclass(frozen=True)
class TextRange:
    """Half-open range of absolute character offsets in a source file."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid text range [{self.start}, {self.end})")


@dataclass(frozen=True)
class DocComment:
    """Raw docstring body (between the quotes) and the offset of its first character."""

    text: str
    offset: int

    @property
    def range(self) -> TextRange:
        return TextRange(self.offset, self.offset + len(self.text))


@dataclass(frozen=True)
class BehaviorSpecification:
    """One ``@should`` fragment of a docstring.

    ``range`` covers the description only. A tag with nothing after it has an
    empty ``description``; its ``range`` then falls back to the marker itself
    so the finding still has something to point at.
    """

    description: str
    range: TextRange
    marker_range: TextRange
    position: int


def has_behavior_tags(doc_comment: Optional[DocComment]) -> bool:
    """Return True if the docstring carries at least one ``@should`` tag."""
    if doc_comment is None:
        return False
    return any(
        match.group("tag") == SHOULD_TAG for match in _MARKER_PATTERN.finditer(doc_comment.text)
    )


def parse_behavior_tags(doc_comment: Optional[DocComment]) -> List[BehaviorSpecification]:
    """Extract the ordered ``@should`` fragments of a docstring.

    Args:
        doc_comment: The docstring to scan, or None for an undocumented method.

    Returns:
        One BehaviorSpecification per ``@should`` tag, in textual order.
        An undocumented method yields an empty list.
    """
    if doc_comment is None:
        return []

    text = doc_comment.text
    markers = list(_MARKER_PATTERN.finditer(text))
    specifications: List[BehaviorSpecification] = []

    for index, marker in enumerate(markers):
        if marker.group("tag") != SHOULD_TAG:
            continue

        fragment_start = marker.end("tag")
        fragment_end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
        fragment = text[fragment_start:fragment_end]

        marker_range = TextRange(
            doc_comment.offset + marker.start("tag"), doc_comment.offset + marker.end("tag")
        )
        stripped = fragment.strip()
        if stripped:
            local_start = fragment_start + (len(fragment) - len(fragment.lstrip()))
            local_end = local_start + len(stripped)
            description_range = TextRange(
                doc_comment.offset + local_start, doc_comment.offset + local_end
            )
        else:
            description_range = marker_range

        specifications.append(
            BehaviorSpecification(
                description=" ".join(stripped.split()),
                range=description_range,
                marker_range=marker_range,
                position=len(specifications) + 1,
            )
        )

    return specifications
