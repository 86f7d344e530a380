"""Name normalization and numeric rounding helpers for graph building."""

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import List

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_SYMPTOM_SEPARATORS = re.compile(r"[;|,]")


def slugify(name: str) -> str:
    """
    Derive a node id from a display name.

    Lower-cases the name, collapses every run of characters outside
    ``[a-z0-9]`` to a single underscore and trims underscores at both ends.

    - "Fungal infection" → "fungal_infection"
    - " skin_rash " → "skin_rash"
    - "(vertigo) Paroymsal  Positional Vertigo" → "vertigo_paroymsal_positional_vertigo"

    Args:
        name: Raw display name

    Returns:
        Slug, possibly empty when the name has no ASCII letters or digits
    """
    return _NON_ALNUM_RUN.sub("_", name.lower()).strip("_")


def split_symptom_cell(cell: str) -> List[str]:
    """
    Split a cell that may hold several symptoms separated by ``;``, ``|`` or ``,``.

    Args:
        cell: Raw cell value

    Returns:
        Trimmed, non-empty symptom names in cell order (duplicates kept)
    """
    parts = (part.strip() for part in _SYMPTOM_SEPARATORS.split(cell))
    return [part for part in parts if part]


def round_half_up(value: float, places: int = 3) -> float:
    """
    Round on the exact binary value, ties away from zero.

    ``round(0.0625, 3)`` gives 0.062 (ties-to-even) while this gives 0.063.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_coordinate(value: float) -> int:
    """Round a layout coordinate to an integer, halves rounding up."""
    return int(math.floor(value + 0.5))
