"""Core types for the wplink catalog entity linker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

FieldKind = Literal["name", "subject"]

Role = Literal[
    "PersonName",
    "PlainSubject",
    "DateRange",
    "Acronym",
    "Year",
    "Compound",
]

# Roles that issue their own oracle query
SEARCHABLE_ROLES: frozenset[str] = frozenset(
    {"PersonName", "PlainSubject", "Acronym", "Year"}
)


@dataclass(frozen=True)
class FieldText:
    text: str
    kind: FieldKind
    id: str = "0"


@dataclass(frozen=True)
class NameParts:
    last_name: str
    first_and_middle_names: str = ""

    @property
    def query(self) -> str:
        if not self.first_and_middle_names:
            return self.last_name
        return f"{self.first_and_middle_names} {self.last_name}"

    def parts(self, min_length: int = 2) -> list[str]:
        """Name parts used for snippet matching: last name plus longer given names."""
        parts: list[str] = []
        if self.last_name:
            parts.append(self.last_name)
        for word in self.first_and_middle_names.split():
            if len(word) >= min_length:
                parts.append(word)
        return parts


@dataclass
class Component:
    """A classified span of a field text.

    ``start``/``end`` are character offsets into the owning field's text.
    """

    id: str
    text: str
    role: Role
    start: int
    end: int
    children: list[Component] = field(default_factory=list)
    name_parts: NameParts | None = None

    @property
    def searchable(self) -> bool:
        return self.role in SEARCHABLE_ROLES

    @property
    def query(self) -> str:
        if self.name_parts is not None:
            return self.name_parts.query
        return self.text

    def leaves(self) -> list[Component]:
        """Searchable descendants (or self) in text order."""
        if not self.children:
            return [self] if self.searchable else []
        found: list[Component] = []
        for child in self.children:
            found.extend(child.leaves())
        return found


@dataclass(frozen=True)
class SearchResult:
    title: str
    snippet: str = ""


@dataclass(frozen=True)
class MatchDecision:
    accepted: bool
    canonical_title: str | None = None
    tier: str | None = None

    @classmethod
    def accept(cls, title: str, tier: str) -> MatchDecision:
        return cls(accepted=True, canonical_title=title, tier=tier)

    @classmethod
    def reject(cls) -> MatchDecision:
        return cls(accepted=False)


@dataclass(frozen=True)
class Annotation:
    field_id: str
    component_id: str
    text: str
    start: int
    end: int
    canonical_title: str


@dataclass
class FieldResult:
    field: FieldText
    components: list[Component]
    separators: list[str] = field(default_factory=list)
    decisions: dict[str, MatchDecision] = field(default_factory=dict)
    annotations: list[Annotation] = field(default_factory=list)

    def leaves(self) -> list[Component]:
        found: list[Component] = []
        for component in self.components:
            found.extend(component.leaves())
        return found
