from __future__ import annotations

from .parser import ROLE_SEPARATOR
from .types import (
    AtLeast,
    Attribute,
    Binary,
    Cardinality,
    Entity,
    ErModel,
    Exactly,
    Range,
    SubTypeClosed,
    SubTypeOpen,
)

# ============================================================================
# ER notation formatter
#
# Writes an ErModel back as notation text in canonical form: entity blocks
# first (each followed by a blank line), then relationships. Parsing the
# output yields an equal model.
# ============================================================================


def format_model(model: ErModel) -> str:
    blocks = [format_entity(e) for e in model.entities]
    lines: list[str] = []
    for rel in model.relationships:
        if isinstance(rel, Binary):
            lines.append(
                f'{rel.entity1} "{rel.role1}" '
                f"{format_cardinality(rel.card1)}:{format_cardinality(rel.card2)} "
                f'{rel.entity2} "{rel.role2}"'
            )
        elif isinstance(rel, SubTypeOpen):
            lines.append(f"{rel.supertype} >: {' + '.join(rel.subtypes)}")
        elif isinstance(rel, SubTypeClosed):
            lines.append(f"{rel.supertype} =({rel.discriminator}) {' + '.join(rel.subtypes)}")
        else:
            raise TypeError(f"unsupported relationship: {rel!r}")
    if lines:
        blocks.append("\n".join(lines))
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def format_entity(entity: Entity) -> str:
    lines = [f"[{entity.name}]"]
    lines.extend(format_attribute(a) for a in entity.attributes)
    return "\n".join(lines)


def format_attribute(attr: Attribute) -> str:
    tokens = [attr.name.replace(ROLE_SEPARATOR, "/")]
    if attr.in_pk:
        tokens.append(":pk")
    if attr.in_fk:
        tokens.append(":fk")
    if attr.nullable:
        tokens.append(":null")
    tokens.extend(f":ak{group}" for group in attr.ak_groups)
    return " ".join(tokens)


def format_cardinality(card: Cardinality) -> str:
    if isinstance(card, Exactly):
        return str(card.n)
    if isinstance(card, Range):
        return f"{card.low}..{card.high}"
    if isinstance(card, AtLeast):
        return "*" if card.n == 0 else f"{card.n}+"
    raise TypeError(f"unsupported cardinality: {card!r}")
