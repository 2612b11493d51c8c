"""
Tag-role table for USFX markup.

Every tag the extractor sees is classified by name into one role:

- BOOK, CHAPTER, VERSE, VERSE_END : structural markers that move the context
- ANNOTATION                      : subtree is not verse text (footnotes, headings...)
- CONTENT                         : inline/block markup whose text belongs to the verse

Tags not listed anywhere are CONTENT. The table can be overridden from a
JSON file so a translation with its own conventions does not need a code
change.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from .errors import InvalidTagTable
from .util import info


class TagRole(enum.Enum):
    BOOK = "book"
    CHAPTER = "chapter"
    VERSE = "verse"
    VERSE_END = "verse_end"
    ANNOTATION = "annotation"
    CONTENT = "content"

    @property
    def is_structural(self) -> bool:
        return self in _STRUCTURAL


_STRUCTURAL = frozenset({TagRole.BOOK, TagRole.CHAPTER, TagRole.VERSE, TagRole.VERSE_END})

# Roles that may be configured; CONTENT is whatever is left over.
CONFIGURABLE_ROLES = (
    TagRole.BOOK,
    TagRole.CHAPTER,
    TagRole.VERSE,
    TagRole.VERSE_END,
    TagRole.ANNOTATION,
)

DEFAULT_ROLE_TAGS: Dict[TagRole, FrozenSet[str]] = {
    TagRole.BOOK: frozenset({"book"}),
    TagRole.CHAPTER: frozenset({"c", "chapter"}),
    TagRole.VERSE: frozenset({"v", "verse"}),
    TagRole.VERSE_END: frozenset({"ve"}),
    TagRole.ANNOTATION: frozenset({
        # notes
        "f", "fe", "x",
        # headings and titles
        "s", "ms", "mr", "sr", "r", "mt", "h", "toc",
        # labels and alternate/published numbering
        "cl", "cp", "vp", "ca", "va",
        # book identification and remarks
        "id", "ide", "rem",
        "fig", "rq",
    }),
}


DEFAULT_MILESTONES: FrozenSet[str] = frozenset({"c", "v", "ve", "verse"})

MILESTONE_KEY = "milestone"


@dataclass(frozen=True)
class TagTable:
    """
    Immutable mapping from tag local name to TagRole.

    `milestones` are structural tags written as empty elements (<v id="1"/>):
    their end tag closes nothing, and the text that follows belongs to them.
    Every other structural tag is a container and closes on its end tag.
    """
    roles: Mapping[str, TagRole] = field(default_factory=dict)
    milestones: FrozenSet[str] = frozenset()

    @classmethod
    def from_role_tags(
        cls,
        role_tags: Mapping[TagRole, Iterable[str]],
        milestones: Iterable[str] = (),
    ) -> "TagTable":
        """
        Build a table from {role: tag names}. A tag may only have one role,
        and only structural tags may be milestones.
        """
        roles: Dict[str, TagRole] = {}
        for role, names in role_tags.items():
            if role is TagRole.CONTENT:
                raise InvalidTagTable("CONTENT is implicit and cannot be listed")
            for name in names:
                if name in roles and roles[name] is not role:
                    raise InvalidTagTable(
                        f"Tag {name!r} listed as both {roles[name].value!r} and {role.value!r}"
                    )
                roles[name] = role

        milestones = frozenset(milestones)
        for name in sorted(milestones):
            if not roles.get(name, TagRole.CONTENT).is_structural:
                raise InvalidTagTable(f"Milestone tag {name!r} is not a book/chapter/verse tag")
        return cls(roles=roles, milestones=milestones)

    def role(self, name: str) -> TagRole:
        return self.roles.get(name, TagRole.CONTENT)

    def is_milestone(self, name: str) -> bool:
        return name in self.milestones


DEFAULT_TAG_TABLE = TagTable.from_role_tags(DEFAULT_ROLE_TAGS, DEFAULT_MILESTONES)


def _tag_list(path: Path, key: str, names) -> FrozenSet[str]:
    if not isinstance(names, list) or not all(isinstance(n, str) and n for n in names):
        raise InvalidTagTable(f"{path}: {key!r} must be a list of tag names")
    return frozenset(names)


def load_tag_table(path: Optional[Path] = None) -> TagTable:
    """
    Load the tag table from a JSON file, falling back to the defaults.

    The file is a JSON object with any of the keys
    "book", "chapter", "verse", "verse_end", "annotation" and "milestone",
    each a list of tag names. A key that is present replaces the defaults
    for that role (or the default milestone set).

    Returns
    -------
    TagTable
        DEFAULT_TAG_TABLE when the file does not exist.
    """
    if path is None or not path.exists():
        return DEFAULT_TAG_TABLE

    info(f"Loading tag table from: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidTagTable(f"{path}: not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise InvalidTagTable(f"{path}: expected a JSON object of role -> tag list")

    known = {role.value: role for role in CONFIGURABLE_ROLES}
    unknown = sorted(set(data) - set(known) - {MILESTONE_KEY})
    if unknown:
        raise InvalidTagTable(
            f"{path}: unknown key(s) {unknown}; expected {sorted(known) + [MILESTONE_KEY]}"
        )

    role_tags: Dict[TagRole, FrozenSet[str]] = dict(DEFAULT_ROLE_TAGS)
    milestones = DEFAULT_MILESTONES
    for key, names in data.items():
        if key == MILESTONE_KEY:
            milestones = _tag_list(path, key, names)
        else:
            role_tags[known[key]] = _tag_list(path, key, names)

    # milestones left over from the defaults only apply to tags still structural
    if MILESTONE_KEY not in data:
        milestones = frozenset(
            n for n in milestones
            if any(n in names for role, names in role_tags.items() if role is not TagRole.ANNOTATION)
        )
    return TagTable.from_role_tags(role_tags, milestones)
