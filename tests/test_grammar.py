"""Tests for the ER notation grammar.

Covers: entity headers, attribute lines and modifiers, binary and subtype
relationship lines, cardinality tokens, and syntax error locations.
"""
from __future__ import annotations

import pytest

from pretty_erd.errors import MalformedInputError
from pretty_erd.grammar import (
    BinaryNode,
    EntityNode,
    SubtypeClosedNode,
    SubtypeOpenNode,
    tokenize,
)


# ============================================================================
# Entity blocks
# ============================================================================


class TestEntityBlocks:
    def test_tokenizes_header_and_attribute_lines(self):
        nodes = tokenize("[person]\nperson_id :pk\nname\n")
        assert len(nodes) == 1
        entity = nodes[0]
        assert isinstance(entity, EntityNode)
        assert entity.name == "person"
        assert [a.names for a in entity.attributes] == [["person_id"], ["name"]]

    def test_tokenizes_entity_without_attributes(self):
        nodes = tokenize("[underground_biome]")
        assert nodes[0].name == "underground_biome"
        assert nodes[0].attributes == []

    def test_allows_whitespace_inside_header(self):
        nodes = tokenize("  [  person ]  ")
        assert nodes[0].name == "person"

    def test_modifiers_are_kept_in_source_order(self):
        nodes = tokenize("[pet]\nowner_id :null :fk :ak2 :pk")
        mods = nodes[0].attributes[0].modifiers
        assert [m.kind for m in mods] == ["null", "fk", "ak", "pk"]
        assert mods[2].group == 2

    def test_records_modifier_columns(self):
        nodes = tokenize("[pet]\nowner_id :fk  :null")
        mods = nodes[0].attributes[0].modifiers
        assert (mods[0].line, mods[0].column) == (2, 10)
        assert mods[1].column == 15

    def test_role_qualified_attribute_has_two_names(self):
        nodes = tokenize("[predation]\npredator/species_id :pk :fk\nprey / species_id :pk")
        attrs = nodes[0].attributes
        assert attrs[0].names == ["predator", "species_id"]
        assert attrs[1].names == ["prey", "species_id"]

    def test_blank_lines_do_not_close_a_block(self):
        nodes = tokenize("[person]\n\nperson_id :pk\n\n   \nname")
        assert len(nodes) == 1
        assert len(nodes[0].attributes) == 2

    def test_multiple_alternate_keys(self):
        nodes = tokenize("[species]\nscientific_name :ak1 :ak12")
        mods = nodes[0].attributes[0].modifiers
        assert [m.group for m in mods] == [1, 12]


# ============================================================================
# Relationship lines
# ============================================================================


class TestRelationshipLines:
    def test_tokenizes_binary_relationship(self):
        nodes = tokenize('species "lives in" 1+:1+ biome "supports"')
        rel = nodes[0]
        assert isinstance(rel, BinaryNode)
        assert rel.entity1 == "species"
        assert rel.role1 == "lives in"
        assert rel.entity2 == "biome"
        assert rel.role2 == "supports"
        assert (rel.card1.kind, rel.card1.values) == ("at_least", (1,))
        assert (rel.card2.kind, rel.card2.values) == ("at_least", (1,))

    def test_binary_tolerates_spacing_around_colon(self):
        nodes = tokenize('a "x"   1 :  *   b   "y"')
        assert nodes[0].card1.kind == "exact"
        assert nodes[0].card2.kind == "any"

    def test_binary_allows_empty_roles(self):
        nodes = tokenize('a "" 1:1 b ""')
        assert nodes[0].role1 == ""
        assert nodes[0].role2 == ""

    def test_tokenizes_open_subtype(self):
        nodes = tokenize("moving_species >: crawling_species + flying_species + swimming_species")
        rel = nodes[0]
        assert isinstance(rel, SubtypeOpenNode)
        assert rel.supertype == "moving_species"
        assert rel.subtypes == ["crawling_species", "flying_species", "swimming_species"]

    def test_tokenizes_closed_subtype(self):
        nodes = tokenize("species =(can_move) stationary_species + moving_species")
        rel = nodes[0]
        assert isinstance(rel, SubtypeClosedNode)
        assert rel.discriminator == "can_move"
        assert rel.subtypes == ["stationary_species", "moving_species"]

    def test_closed_subtype_discriminator_is_trimmed_text(self):
        nodes = tokenize("biome = ( biome type ) surface_biome")
        assert nodes[0].discriminator == "biome type"

    def test_single_subtype_is_allowed(self):
        nodes = tokenize("a >: b")
        assert nodes[0].subtypes == ["b"]

    def test_relationship_closes_entity_block(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize('[a]\nid :pk\na "x" 1:1 b "y"\nname')
        assert exc.value.line == 4

    def test_keeps_interleaved_order(self):
        nodes = tokenize('[a]\nid :pk\na >: b\n[b]\nid :pk :fk\n')
        assert [type(n).__name__ for n in nodes] == ["EntityNode", "SubtypeOpenNode", "EntityNode"]


# ============================================================================
# Cardinalities
# ============================================================================


class TestCardinalities:
    @pytest.mark.parametrize(
        "token, kind, values",
        [
            ("*", "any", ()),
            ("3", "exact", (3,)),
            ("0+", "at_least", (0,)),
            ("12+", "at_least", (12,)),
            ("2..5", "range", (2, 5)),
        ],
    )
    def test_cardinality_tokens(self, token, kind, values):
        nodes = tokenize(f'a "x" {token}:1 b "y"')
        assert (nodes[0].card1.kind, nodes[0].card1.values) == (kind, values)

    def test_records_cardinality_column(self):
        nodes = tokenize('a "x" 1:2..3 b "y"')
        assert nodes[0].card1.column == 7
        assert nodes[0].card2.column == 9


# ============================================================================
# Syntax errors
# ============================================================================


class TestSyntaxErrors:
    def test_attribute_before_any_entity(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("\n  name :pk")
        assert (exc.value.line, exc.value.column) == (2, 3)
        assert "entity header" in exc.value.expected

    def test_unknown_modifier(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("[a]\nid :primary")
        assert (exc.value.line, exc.value.column) == (2, 4)

    def test_alternate_key_zero_is_rejected(self):
        with pytest.raises(MalformedInputError):
            tokenize("[a]\nid :ak0")

    def test_alternate_key_above_limit_is_rejected(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("[a]\ncode :pk :ak65")
        assert (exc.value.line, exc.value.column) == (2, 10)
        assert "alternate key group" in exc.value.expected

    def test_huge_alternate_key_is_rejected_quickly(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("[a]\ncode :ak1000000")
        assert exc.value.column == 6

    def test_alternate_key_at_limit_is_accepted(self):
        nodes = tokenize("[a]\ncode :ak64")
        assert nodes[0].attributes[0].modifiers[0].group == 64

    def test_modifier_must_end_at_word_boundary(self):
        with pytest.raises(MalformedInputError):
            tokenize("[a]\nid :pkx")

    def test_stray_word_on_attribute_line(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("[a]\nid int")
        assert exc.value.column == 4

    def test_unterminated_header(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("[person")
        assert exc.value.column == 8

    def test_missing_cardinality(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize('a "x" :1 b "y"')
        assert "cardinality" in exc.value.expected

    def test_missing_second_role(self):
        with pytest.raises(MalformedInputError):
            tokenize('a "x" 1:1 b')

    def test_empty_discriminator(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("a =( ) b")
        assert "discriminator" in exc.value.expected

    def test_dangling_plus_in_subtype_list(self):
        with pytest.raises(MalformedInputError):
            tokenize("a >: b +")

    def test_name_cannot_start_with_digit(self):
        with pytest.raises(MalformedInputError):
            tokenize("[1st]")

    def test_error_message_shows_location(self):
        with pytest.raises(MalformedInputError) as exc:
            tokenize("[a]\nid :bogus")
        message = str(exc.value)
        assert message.startswith("line 2, column 4: expected")
        assert "id :bogus" in message

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            tokenize("???")
