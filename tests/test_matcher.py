"""Unit tests for the schema matcher."""

# Module responsibilities:
# - Check the bigram similarity metric on known values.
# - Assert the hard threshold boundary, tie-breaking and determinism.

from __future__ import annotations

import pytest

from docfill.config import SchemaMapping
from docfill.services.matching import SchemaMatcher, dice_similarity


def _schema(payload: dict[str, str]) -> SchemaMapping:
    return SchemaMapping.from_dict(payload)


def test_dice_similarity_known_values() -> None:
    assert dice_similarity("NAME", "NAME") == 1.0
    assert dice_similarity("FULL NAME", "FULLNAME") == 1.0
    assert dice_similarity("A", "B") == 0.0
    assert dice_similarity("healed", "sealed") == pytest.approx(0.8)
    assert dice_similarity("ABCDEFGHIJK", "ABCDEFGHIJX") == pytest.approx(0.9)
    assert dice_similarity("name", "NAME") == 0.0


def test_exact_heading_matches() -> None:
    matcher = SchemaMatcher(schema=_schema({"NAME": "B2", "AGE": "B3"}))
    result = matcher.match("NAME")
    assert result.cell == "B2"
    assert result.best_heading == "NAME"
    assert result.similarity == 1.0
    assert result.matched


def test_threshold_is_inclusive() -> None:
    matcher = SchemaMatcher(schema=_schema({"ABCDEFGHIJK": "C4"}))
    result = matcher.match("ABCDEFGHIJX")
    assert result.similarity == 0.9
    assert result.cell == "C4"


@pytest.mark.parametrize("score,expected", [(0.9, "B2"), (0.8999999, None), (0.95, "B2")])
def test_threshold_boundary_with_fixed_scorer(score: float, expected) -> None:
    matcher = SchemaMatcher(schema=_schema({"NAME": "B2"}), scorer=lambda a, b: score)
    assert matcher.match("ANYTHING").cell == expected


def test_below_threshold_is_unmapped() -> None:
    matcher = SchemaMatcher(schema=_schema({"NAME": "B2", "AGE": "B3"}))
    result = matcher.match("ADDRESS")
    assert result.cell is None
    assert not result.matched
    assert result.similarity < 0.9


def test_ties_pick_first_schema_key() -> None:
    matcher = SchemaMatcher(schema=_schema({"FIRST": "A1", "SECOND": "A2"}), scorer=lambda a, b: 0.95)
    result = matcher.match("WHATEVER")
    assert result.best_heading == "FIRST"
    assert result.cell == "A1"


def test_empty_schema_never_matches() -> None:
    result = SchemaMatcher(schema=_schema({})).match("NAME")
    assert result.cell is None
    assert result.best_heading is None
    assert result.similarity == 0.0


def test_matcher_is_deterministic() -> None:
    matcher = SchemaMatcher(schema=_schema({"EMAIL ADDRESS": "B4", "MAIL ADDRESS": "B5", "PHONE": "B6"}))
    results = {matcher.match("EMAIL ADRESS") for _ in range(5)}
    assert len(results) == 1
    assert next(iter(results)).cell == "B4"


def test_match_all_preserves_field_order() -> None:
    matcher = SchemaMatcher(schema=_schema({"NAME": "B2", "AGE": "B3"}))
    results = matcher.match_all({"AGE": "34", "ADDRESS": "x", "NAME": "John"})
    assert [r.heading for r in results] == ["AGE", "ADDRESS", "NAME"]
    assert [r.cell for r in results] == ["B3", None, "B2"]
