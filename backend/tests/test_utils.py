"""
Test utility functions.
"""

import json

from diseasegraph.utils.file_utils import read_text_file, write_json_file
from diseasegraph.utils.normalization import (
    round_coordinate,
    round_half_up,
    slugify,
    split_symptom_cell,
)


def test_slugify():
    """Test slug derivation from display names."""
    assert slugify("Flu") == "flu"
    assert slugify("Fungal infection") == "fungal_infection"
    assert slugify(" skin_rash ") == "skin_rash"
    assert slugify("(vertigo) Paroymsal  Positional Vertigo") == (
        "vertigo_paroymsal_positional_vertigo"
    )
    assert slugify("Hepatitis--B!!") == "hepatitis_b"
    assert slugify("???") == ""


def test_slugify_is_idempotent():
    """Slugging a slug returns it unchanged."""
    for name in ["Common Cold", "  Dimorphic hemmorhoids(piles) ", "GERD", "a__b"]:
        once = slugify(name)
        assert slugify(once) == once


def test_split_symptom_cell():
    """Test splitting multi-symptom cells."""
    assert split_symptom_cell("fever") == ["fever"]
    assert split_symptom_cell("fever; cough|chills") == ["fever", "cough", "chills"]
    assert split_symptom_cell(" ; fever ;; ") == ["fever"]
    assert split_symptom_cell("fever;fever") == ["fever", "fever"]


def test_round_half_up():
    """Ties round up, unlike the built-in round."""
    assert round_half_up(0.0625, 3) == 0.063
    assert round_half_up(1 / 3, 3) == 0.333
    assert round_half_up(2 / 3, 3) == 0.667
    assert round_half_up(1.0, 3) == 1.0


def test_round_coordinate():
    assert round_coordinate(120.5) == 121
    assert round_coordinate(420 + (1 / 5) * 320) == 484
    assert round_coordinate(79.4) == 79


def test_write_json_file_creates_parents(tmp_path):
    """Test pretty-printed JSON output into a new directory."""
    target = tmp_path / "public" / "data" / "graph.json"
    written = write_json_file(target, {"nodes": [], "edges": []})
    assert written == target.resolve()
    text = read_text_file(target)
    assert text.startswith("{\n  ")
    assert json.loads(text) == {"nodes": [], "edges": []}
