from __future__ import annotations

# ============================================================================
# Defaults for user-overridable render options
# ============================================================================

DEFAULTS = {
    "edge_color": "gray",
    # U+2217 ASTERISK OPERATOR, the "many" cardinality label
    "many_glyph": "∗",
    # Plain UTF-8; a leading byte order mark is dropped
    "encoding": "utf-8-sig",
}

# ============================================================================
# Font sizes (points) inside HTML-like labels
# ============================================================================

FONT_SIZES = {
    "decoration": 8,
    "edge_label": 10,
    "discriminator": 10,
}

# ============================================================================
# Graph-wide directives
# ============================================================================

GRAPH_ATTR = {
    "splines": "ortho",
}

# Entities draw their own table borders
NODE_ATTR = {
    "shape": "plain",
}

EDGE_ATTR = {
    "arrowhead": "none",
}

# ============================================================================
# Subtype junction nodes
# ============================================================================

JUNCTION_PREFIX = "subtype"

JUNCTION_WIDTH = "0.2"
