from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator

import graphviz

from .styles import (
    DEFAULTS,
    EDGE_ATTR,
    FONT_SIZES,
    GRAPH_ATTR,
    JUNCTION_PREFIX,
    JUNCTION_WIDTH,
    NODE_ATTR,
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
    Range,
    RenderOptions,
    SubTypeClosed,
    SubTypeOpen,
)

# ============================================================================
# ER model DOT emitter
#
# Renders an ErModel as a Graphviz digraph description.
#
# Emit order:
#   1. Graph, node and edge directives (shape=plain, orthogonal splines)
#   2. Entity nodes, one HTML-like table label each
#   3. Relationships in source order:
#        binary   -> one edge with cardinality and role labels
#        subtype  -> one junction node, an edge from the supertype to it,
#                    and one edge from it to each subtype
# ============================================================================

logger = logging.getLogger(__name__)


def emit_dot(model: ErModel, options: RenderOptions | None = None) -> str:
    """Render an ErModel as DOT source text."""
    return build_digraph(model, options).source


def build_digraph(model: ErModel, options: RenderOptions | None = None) -> graphviz.Digraph:
    """Build a graphviz.Digraph for an ErModel.

    Junction node ids count from 1 on every call and skip ids already
    taken by an entity name.
    """
    if options is None:
        options = RenderOptions()

    many_glyph = options.many_glyph if options.many_glyph is not None else DEFAULTS["many_glyph"]

    graph_attr = dict(GRAPH_ATTR)
    if options.direction:
        graph_attr["rankdir"] = options.direction
    edge_attr = dict(EDGE_ATTR, color=options.edge_color or DEFAULTS["edge_color"])

    dot = graphviz.Digraph(
        name=options.graph_name,
        graph_attr=graph_attr,
        node_attr=dict(NODE_ATTR),
        edge_attr=edge_attr,
    )

    for entity in model.entities:
        dot.node(entity.name, label=_entity_label(entity))

    junction_ids = _junction_ids(set(model.entity_names()) | set(model.referenced_names()))
    for rel in model.relationships:
        if isinstance(rel, Binary):
            dot.edge(
                rel.entity1,
                rel.entity2,
                label=_font(f"{rel.role1} / {rel.role2}", FONT_SIZES["edge_label"]),
                taillabel=render_cardinality(rel.card1, many_glyph),
                headlabel=render_cardinality(rel.card2, many_glyph),
            )
        elif isinstance(rel, SubTypeOpen):
            junction = next(junction_ids)
            dot.node(junction, label="", shape="circle", width=JUNCTION_WIDTH)
            _fan_out(dot, rel.supertype, junction, rel.subtypes)
        elif isinstance(rel, SubTypeClosed):
            junction = next(junction_ids)
            dot.node(
                junction,
                label=_font(rel.discriminator, FONT_SIZES["discriminator"]),
                shape="doublecircle",
                width=JUNCTION_WIDTH,
                margin="0",
            )
            _fan_out(dot, rel.supertype, junction, rel.subtypes)
        else:
            raise TypeError(f"unsupported relationship: {rel!r}")

    logger.debug(
        "Emitted %d entity nodes and %d relationships",
        len(model.entities),
        len(model.relationships),
    )
    return dot


def _junction_ids(taken: set[str]) -> Iterator[str]:
    for n in itertools.count(1):
        junction = f"{JUNCTION_PREFIX}{n}"
        if junction not in taken:
            yield junction


def _fan_out(dot: graphviz.Digraph, supertype: str, junction: str, subtypes: tuple[str, ...]) -> None:
    dot.edge(supertype, junction)
    for sub in subtypes:
        dot.edge(junction, sub)


# ============================================================================
# Labels
# ============================================================================


def render_cardinality(card: Cardinality, many_glyph: str = DEFAULTS["many_glyph"]) -> str:
    """Render a cardinality as an edge end label.

    Exactly one is the common case and renders as an empty label.
    """
    if isinstance(card, Exactly):
        return "" if card.n == 1 else str(card.n)
    if isinstance(card, Range):
        if card.low == 1 and card.high == 1:
            return ""
        return f"{card.low}..{card.high}"
    if isinstance(card, AtLeast):
        return many_glyph if card == MANY else f"{card.n}+"
    raise TypeError(f"unsupported cardinality: {card!r}")


def attribute_decoration(attr: Attribute) -> str:
    """Modifier tags shown next to an attribute: FK, AK1.., NULL."""
    tags: list[str] = []
    if attr.in_fk:
        tags.append("FK")
    tags.extend(f"AK{group}" for group in attr.ak_groups)
    if attr.nullable:
        tags.append("NULL")
    return " ".join(tags)


def _entity_label(entity: Entity) -> str:
    """HTML-like label: a title row above the key and non-key attribute table.

    Dependent entities get a rounded attribute table.
    """
    style = "" if entity.independent else ' style="rounded"'

    pk = entity.primary_key
    nk = entity.non_key
    rows = [_attribute_row(a) for a in pk]
    # Graphviz rejects <hr/> before the first row
    if pk and nk:
        rows.append("<hr/>")
    rows.extend(_attribute_row(a) for a in nk)
    # Graphviz rejects tables without rows
    if not rows:
        rows.append("<tr><td></td></tr>")

    return (
        '<<table cellspacing="0" border="0">'
        f'<tr><td align="left">{_escape_xml(entity.name)}</td></tr>'
        f'<tr><td><table cellborder="0"{style}>'
        + "".join(rows)
        + "</table></td></tr></table>>"
    )


def _attribute_row(attr: Attribute) -> str:
    decoration = ""
    if attr.has_modifiers:
        decoration = _font_body(attribute_decoration(attr), FONT_SIZES["decoration"])
    return (
        f'<tr><td align="left">{_escape_xml(attr.name)}</td>'
        f'<td align="left">{decoration}</td></tr>'
    )


def _font(text: str, size: int) -> str:
    """A complete HTML-like label with ``text`` in the given point size."""
    return f"<{_font_body(text, size)}>"


def _font_body(text: str, size: int) -> str:
    return f'<font point-size="{size}">{_escape_xml(text)}</font>'


def _escape_xml(text: str) -> str:
    """Escape special XML characters in label text."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )
