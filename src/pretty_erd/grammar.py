from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Literal

from .errors import MalformedInputError
from .types import MAX_AK_GROUP

# ============================================================================
# ER notation grammar
#
# Turns notation text into typed syntax nodes, one per top-level construct,
# in source order.
#
# Supported syntax:
#   [species]                                   entity header
#   species_id :pk                              attribute line
#   predator / species_id :pk :fk :null :ak1    role-qualified attribute
#   species "lives in" 1+:1+ biome "supports"   binary relationship
#   moving_species >: crawling + flying         open subtype
#   biome =(biome_type) surface + ocean         closed subtype
#
# Cardinality notation:
#   *      any number (zero or more)
#   n      exactly n
#   n+     n or more
#   n..m   between n and m
#
# The notation is line oriented. Whitespace between tokens and blank lines
# are insignificant. Attribute lines belong to the most recent entity header
# and the block ends at the next header or relationship line.
# ============================================================================

logger = logging.getLogger(__name__)

_WS = re.compile(r"\s*")
_NAME = re.compile(r"[^\W\d]\w*")
_QUOTED = re.compile(r'"([^"]*)"')
_DISCRIMINATOR = re.compile(r"\(([^()]*)\)")
_MODIFIER = re.compile(r":(pk|fk|null|ak([1-9][0-9]*))(?!\w)")

_CARD_ANY = re.compile(r"\*")
_CARD_RANGE = re.compile(r"([0-9]+)\.\.([0-9]+)")
_CARD_AT_LEAST = re.compile(r"([0-9]+)\+")
_CARD_EXACT = re.compile(r"[0-9]+")

ModifierKind = Literal["pk", "fk", "null", "ak"]
CardinalityKind = Literal["any", "exact", "at_least", "range"]


# ============================================================================
# Syntax nodes
# ============================================================================


@dataclass(slots=True)
class ModifierNode:
    kind: ModifierKind
    line: int
    column: int
    # Alternate key group number, only for "ak"
    group: int | None = None


@dataclass(slots=True)
class AttributeNode:
    # One name, or two for a role-qualified attribute
    names: list[str]
    line: int
    modifiers: list[ModifierNode] = field(default_factory=list)


@dataclass(slots=True)
class EntityNode:
    name: str
    line: int
    attributes: list[AttributeNode] = field(default_factory=list)


@dataclass(slots=True)
class CardinalityNode:
    kind: CardinalityKind
    values: tuple[int, ...]
    line: int
    column: int


@dataclass(slots=True)
class BinaryNode:
    entity1: str
    role1: str
    card1: CardinalityNode
    card2: CardinalityNode
    entity2: str
    role2: str
    line: int


@dataclass(slots=True)
class SubtypeOpenNode:
    supertype: str
    subtypes: list[str]
    line: int


@dataclass(slots=True)
class SubtypeClosedNode:
    supertype: str
    discriminator: str
    subtypes: list[str]
    line: int


SyntaxNode = EntityNode | BinaryNode | SubtypeOpenNode | SubtypeClosedNode


# ============================================================================
# Line scanner
# ============================================================================


class _LineScanner:
    """Cursor over a single source line; skips whitespace between tokens."""

    def __init__(self, text: str, line: int) -> None:
        self.text = text
        self.line = line
        self.pos = 0

    @property
    def column(self) -> int:
        return self.pos + 1

    def skip_ws(self) -> None:
        self.pos = _WS.match(self.text, self.pos).end()

    def at_end(self) -> bool:
        self.skip_ws()
        return self.pos >= len(self.text)

    def peek(self, literal: str) -> bool:
        self.skip_ws()
        return self.text.startswith(literal, self.pos)

    def accept(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        self.skip_ws()
        match = pattern.match(self.text, self.pos)
        if match:
            self.pos = match.end()
        return match

    def accept_literal(self, literal: str) -> bool:
        if self.peek(literal):
            self.pos += len(literal)
            return True
        return False

    def expect(self, pattern: re.Pattern[str], expected: str) -> re.Match[str]:
        match = self.accept(pattern)
        if match is None:
            raise self.error(expected)
        return match

    def expect_literal(self, literal: str) -> None:
        if not self.accept_literal(literal):
            raise self.error(f"'{literal}'")

    def expect_end(self) -> None:
        if not self.at_end():
            raise self.error("end of line")

    def error(self, expected: str, column: int | None = None) -> MalformedInputError:
        return MalformedInputError(
            expected,
            line=self.line,
            column=column if column is not None else self.column,
            source_line=self.text,
        )


# ============================================================================
# Productions
# ============================================================================


def tokenize(text: str) -> list[SyntaxNode]:
    """Parse notation text into syntax nodes.

    Raises MalformedInputError on the first line that does not match any
    production; nothing is returned for the lines before it.
    """
    nodes: list[SyntaxNode] = []
    # Entity block currently accepting attribute lines
    current: EntityNode | None = None

    for line_no, raw in enumerate(text.splitlines(), start=1):
        if not raw.strip():
            continue

        scanner = _LineScanner(raw, line_no)

        # --- Entity header: `[name]` ---
        if scanner.accept_literal("["):
            current = _parse_entity_header(scanner)
            nodes.append(current)
            continue

        name_match = scanner.expect(_NAME, "an entity header, attribute or relationship")
        name = name_match.group(0)

        # --- Relationships ---
        if scanner.peek('"'):
            nodes.append(_parse_binary(scanner, name))
            current = None
            continue
        if scanner.accept_literal(">:"):
            nodes.append(SubtypeOpenNode(name, _parse_subtypes(scanner), line_no))
            current = None
            continue
        if scanner.accept_literal("="):
            nodes.append(_parse_subtype_closed(scanner, name))
            current = None
            continue

        # --- Attribute line inside an entity block ---
        if current is None:
            raise scanner.error(
                "an entity header '[name]' before attribute lines",
                column=name_match.start() + 1,
            )
        current.attributes.append(_parse_attribute(scanner, name))

    logger.debug("Tokenized %d top-level nodes", len(nodes))
    return nodes


def _parse_entity_header(scanner: _LineScanner) -> EntityNode:
    name = scanner.expect(_NAME, "an entity name").group(0)
    scanner.expect_literal("]")
    scanner.expect_end()
    return EntityNode(name=name, line=scanner.line)


def _parse_attribute(scanner: _LineScanner, name: str) -> AttributeNode:
    """Parse the rest of an attribute line: [/ name] {modifier}."""
    attr = AttributeNode(names=[name], line=scanner.line)
    if scanner.accept_literal("/"):
        attr.names.append(scanner.expect(_NAME, "a role-qualified attribute name").group(0))

    while not scanner.at_end():
        column = scanner.column
        match = scanner.expect(_MODIFIER, "a modifier (:pk, :fk, :null or :akN)")
        digits = match.group(2)
        if digits is not None:
            if len(digits) > len(str(MAX_AK_GROUP)) or int(digits) > MAX_AK_GROUP:
                raise scanner.error(f"an alternate key group between 1 and {MAX_AK_GROUP}", column=column)
            attr.modifiers.append(ModifierNode("ak", scanner.line, column, group=int(digits)))
        else:
            attr.modifiers.append(ModifierNode(match.group(1), scanner.line, column))  # type: ignore[arg-type]
    return attr


def _parse_binary(scanner: _LineScanner, entity1: str) -> BinaryNode:
    role1 = scanner.expect(_QUOTED, "a quoted role label").group(1)
    card1 = _parse_cardinality(scanner)
    scanner.expect_literal(":")
    card2 = _parse_cardinality(scanner)
    entity2 = scanner.expect(_NAME, "an entity name").group(0)
    role2 = scanner.expect(_QUOTED, "a quoted role label").group(1)
    scanner.expect_end()
    return BinaryNode(entity1, role1, card1, card2, entity2, role2, scanner.line)


def _parse_subtype_closed(scanner: _LineScanner, supertype: str) -> SubtypeClosedNode:
    scanner.skip_ws()
    column = scanner.column
    match = scanner.expect(_DISCRIMINATOR, "a parenthesized discriminator")
    discriminator = match.group(1).strip()
    if not discriminator:
        raise scanner.error("a non-empty discriminator", column=column + 1)
    return SubtypeClosedNode(supertype, discriminator, _parse_subtypes(scanner), scanner.line)


def _parse_subtypes(scanner: _LineScanner) -> list[str]:
    """Parse `Sub1 + Sub2 + ...` up to the end of the line."""
    subtypes = [scanner.expect(_NAME, "a subtype name").group(0)]
    while scanner.accept_literal("+"):
        subtypes.append(scanner.expect(_NAME, "a subtype name").group(0))
    scanner.expect_end()
    return subtypes


def _parse_cardinality(scanner: _LineScanner) -> CardinalityNode:
    scanner.skip_ws()
    line, column = scanner.line, scanner.column

    if scanner.accept(_CARD_ANY):
        return CardinalityNode("any", (), line, column)
    match = scanner.accept(_CARD_RANGE)
    if match:
        return CardinalityNode("range", (int(match.group(1)), int(match.group(2))), line, column)
    match = scanner.accept(_CARD_AT_LEAST)
    if match:
        return CardinalityNode("at_least", (int(match.group(1)),), line, column)
    match = scanner.accept(_CARD_EXACT)
    if match:
        return CardinalityNode("exact", (int(match.group(0)),), line, column)

    raise scanner.error("a cardinality (*, n, n+ or n..m)")
