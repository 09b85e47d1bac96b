"""pretty-erd -- Turn plain-text ER models into Graphviz diagrams."""

from __future__ import annotations

import logging

from .types import (
    Attribute,
    Entity,
    Exactly,
    Range,
    AtLeast,
    Cardinality,
    Binary,
    SubTypeOpen,
    SubTypeClosed,
    Relationship,
    ErModel,
    RenderOptions,
)
from .errors import ErdError, InputReadError, MalformedInputError
from .styles import DEFAULTS
from .parser import parse_model
from .emitter import emit_dot, build_digraph, render_cardinality
from .formatter import format_model

__all__ = [
    "render_dot",
    "parse_model",
    "emit_dot",
    "build_digraph",
    "format_model",
    "render_cardinality",
    "Attribute",
    "Entity",
    "Exactly",
    "Range",
    "AtLeast",
    "Cardinality",
    "Binary",
    "SubTypeOpen",
    "SubTypeClosed",
    "Relationship",
    "ErModel",
    "RenderOptions",
    "ErdError",
    "InputReadError",
    "MalformedInputError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())


def _decode(text: str | bytes, encoding: str) -> str:
    if isinstance(text, str):
        return text
    try:
        return bytes(text).decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise InputReadError(f"could not read input as {encoding}: {exc}") from exc


def render_dot(
    text: str | bytes,
    options: RenderOptions | None = None,
) -> str:
    """Render ER notation text to a Graphviz DOT document.

    Bytes are decoded with ``options.encoding`` (UTF-8 by default, with an
    optional byte order mark).
    The whole input is parsed before anything is emitted.
    """
    if options is None:
        options = RenderOptions()

    source = _decode(text, options.encoding or DEFAULTS["encoding"])
    model = parse_model(source)
    return emit_dot(model, options)
