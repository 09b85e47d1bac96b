from __future__ import annotations

import logging

from .errors import MalformedInputError
from .grammar import (
    AttributeNode,
    BinaryNode,
    CardinalityNode,
    EntityNode,
    SubtypeClosedNode,
    SubtypeOpenNode,
    SyntaxNode,
    tokenize,
)
from .types import (
    AtLeast,
    Attribute,
    Binary,
    Cardinality,
    Entity,
    ErModel,
    Exactly,
    MANY,
    MAX_AK_GROUP,
    Range,
    Relationship,
    SubTypeClosed,
    SubTypeOpen,
)

# ============================================================================
# ER model parser
#
# Walks the syntax nodes produced by the grammar and builds an ErModel.
# Entities and relationships may be interleaved in the source; each keeps
# its own source order in the model.
# ============================================================================

logger = logging.getLogger(__name__)

ROLE_SEPARATOR = " / "


def parse_model(text: str) -> ErModel:
    """Parse ER notation text into an ErModel."""
    return build_model(tokenize(text))


def build_model(nodes: list[SyntaxNode]) -> ErModel:
    """Build an ErModel from syntax nodes.

    Raises MalformedInputError for any node that does not match a known
    production. No partial model is returned.
    """
    model = ErModel()

    for node in nodes:
        if isinstance(node, EntityNode):
            model.entities.append(_build_entity(node))
        elif isinstance(node, (BinaryNode, SubtypeOpenNode, SubtypeClosedNode)):
            model.relationships.append(_build_relationship(node))
        else:
            raise MalformedInputError(
                f"an entity or relationship, not {type(node).__name__}",
                line=getattr(node, "line", 0),
            )

    _warn_unknown_entities(model)
    logger.debug(
        "Built model with %d entities and %d relationships",
        len(model.entities),
        len(model.relationships),
    )
    return model


def _build_entity(node: EntityNode) -> Entity:
    return Entity(name=node.name, attributes=[_build_attribute(a) for a in node.attributes])


def _build_attribute(node: AttributeNode) -> Attribute:
    """Apply each modifier left to right to a fresh attribute."""
    if not 1 <= len(node.names) <= 2:
        raise MalformedInputError("one or two attribute names", line=node.line)

    attr = Attribute(ROLE_SEPARATOR.join(node.names))
    for mod in node.modifiers:
        if mod.kind == "pk":
            attr.mark_pk()
        elif mod.kind == "fk":
            attr.mark_fk()
        elif mod.kind == "null":
            attr.mark_nullable()
        elif mod.kind == "ak" and mod.group is not None and 1 <= mod.group <= MAX_AK_GROUP:
            attr.toggle_ak(mod.group)
        else:
            raise MalformedInputError(
                "a modifier (:pk, :fk, :null or :akN)", line=mod.line, column=mod.column
            )
    return attr


def _build_relationship(node: BinaryNode | SubtypeOpenNode | SubtypeClosedNode) -> Relationship:
    if isinstance(node, BinaryNode):
        return Binary(
            entity1=node.entity1,
            role1=node.role1,
            card1=_build_cardinality(node.card1),
            entity2=node.entity2,
            role2=node.role2,
            card2=_build_cardinality(node.card2),
        )
    if isinstance(node, SubtypeOpenNode):
        return SubTypeOpen(node.supertype, tuple(node.subtypes))
    if isinstance(node, SubtypeClosedNode):
        return SubTypeClosed(node.supertype, node.discriminator, tuple(node.subtypes))
    raise MalformedInputError("a relationship", line=node.line)


def _build_cardinality(node: CardinalityNode) -> Cardinality:
    if node.kind == "any" and not node.values:
        return MANY
    if node.kind == "exact" and len(node.values) == 1:
        return Exactly(node.values[0])
    if node.kind == "at_least" and len(node.values) == 1:
        return AtLeast(node.values[0])
    if node.kind == "range" and len(node.values) == 2:
        low, high = node.values
        if low > high:
            raise MalformedInputError(
                f"a range with lower bound <= upper bound, got {low}..{high}",
                line=node.line,
                column=node.column,
            )
        return Range(low, high)
    raise MalformedInputError("a cardinality (*, n, n+ or n..m)", line=node.line, column=node.column)


def _warn_unknown_entities(model: ErModel) -> None:
    """Log relationship endpoints that name no declared entity.

    Such references are kept as-is; the renderer draws a bare node for them.
    """
    declared = set(model.entity_names())
    for name in model.referenced_names():
        if name not in declared:
            logger.warning("Relationship refers to undeclared entity %r", name)
