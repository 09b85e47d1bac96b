from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# ============================================================================
# ER model types
#
# The parsed representation of an ER model: entities with their attributes,
# and relationships that refer to entities by name. Relationships are never
# resolved against the entity list here.
# ============================================================================

# Highest alternate key group number an attribute can carry
MAX_AK_GROUP = 64


@dataclass(slots=True)
class Attribute:
    """A single attribute of an entity."""

    # Display name; "role / name" for role-qualified attributes
    name: str
    in_pk: bool = False
    in_fk: bool = False
    nullable: bool = False
    # Alternate key groups as a bit set: group N is bit N-1
    aks: int = 0

    def mark_pk(self) -> Attribute:
        self.in_pk = True
        return self

    def mark_fk(self) -> Attribute:
        self.in_fk = True
        return self

    def mark_nullable(self) -> Attribute:
        self.nullable = True
        return self

    def toggle_ak(self, group: int) -> Attribute:
        """Flip membership in alternate key ``group`` (1-based).

        Applying the same group twice leaves the attribute outside it.
        """
        if not 1 <= group <= MAX_AK_GROUP:
            raise ValueError(f"alternate key group must be 1..{MAX_AK_GROUP}, got {group}")
        self.aks ^= 1 << (group - 1)
        return self

    @property
    def ak_groups(self) -> list[int]:
        """Alternate key groups this attribute belongs to, ascending."""
        groups: list[int] = []
        bits = self.aks
        while bits:
            lowest = bits & -bits
            groups.append(lowest.bit_length())
            bits ^= lowest
        return groups

    @property
    def has_modifiers(self) -> bool:
        return self.in_fk or self.nullable or self.aks != 0


@dataclass(slots=True)
class Entity:
    """An entity block: a name plus its attributes in declaration order."""

    name: str
    attributes: list[Attribute] = field(default_factory=list)
    # False when any attribute is both PK and FK (a dependent entity)
    independent: bool = field(init=False)

    def __post_init__(self) -> None:
        self.independent = not any(a.in_pk and a.in_fk for a in self.attributes)

    @property
    def primary_key(self) -> list[Attribute]:
        return [a for a in self.attributes if a.in_pk]

    @property
    def non_key(self) -> list[Attribute]:
        return [a for a in self.attributes if not a.in_pk]


# ============================================================================
# Cardinality
#
#   Exactly(n)      exactly n
#   Range(n, m)     between n and m inclusive
#   AtLeast(n)      n or more; AtLeast(0) is "many"
# ============================================================================


@dataclass(frozen=True, slots=True)
class Exactly:
    n: int


@dataclass(frozen=True, slots=True)
class Range:
    low: int
    high: int


@dataclass(frozen=True, slots=True)
class AtLeast:
    n: int


Cardinality = Exactly | Range | AtLeast

MANY = AtLeast(0)


# ============================================================================
# Relationships
# ============================================================================


@dataclass(frozen=True, slots=True)
class Binary:
    """A named association between two entities.

    Each cardinality describes how many instances of the other entity one
    instance of its own side takes part with.
    """

    entity1: str
    role1: str
    card1: Cardinality
    entity2: str
    role2: str
    card2: Cardinality


@dataclass(frozen=True, slots=True)
class SubTypeOpen:
    """Non-exhaustive, non-exclusive specialization of ``supertype``."""

    supertype: str
    subtypes: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SubTypeClosed:
    """Exhaustive, exclusive partition of ``supertype`` by a discriminator."""

    supertype: str
    discriminator: str
    subtypes: tuple[str, ...]


Relationship = Binary | SubTypeOpen | SubTypeClosed


@dataclass(slots=True)
class ErModel:
    """Parsed ER model -- logical structure from the notation text."""

    entities: list[Entity] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)

    def entity_names(self) -> list[str]:
        return [e.name for e in self.entities]

    def referenced_names(self) -> list[str]:
        """Entity names used by relationships, in first-use order."""
        names: dict[str, None] = {}
        for rel in self.relationships:
            if isinstance(rel, Binary):
                names.update(dict.fromkeys([rel.entity1, rel.entity2]))
            else:
                names.update(dict.fromkeys([rel.supertype, *rel.subtypes]))
        return list(names)


# ============================================================================
# Render options -- user-facing configuration
# ============================================================================

Direction = Literal["TB", "LR", "BT", "RL"]


@dataclass(slots=True)
class RenderOptions:
    # Graphviz rankdir; unset leaves the renderer's top-down default
    direction: Direction | None = None
    edge_color: str | None = None
    # Label used for AtLeast(0)
    many_glyph: str | None = None
    graph_name: str | None = None
    # Used to decode bytes input
    encoding: str | None = None
