"""
Utils package initialization.
"""

from diseasegraph.utils.file_utils import (
    ensure_parent_dir,
    read_text_file,
    write_json_file,
)
from diseasegraph.utils.normalization import (
    round_coordinate,
    round_half_up,
    slugify,
    split_symptom_cell,
)

__all__ = [
    "ensure_parent_dir",
    "read_text_file",
    "write_json_file",
    "round_coordinate",
    "round_half_up",
    "slugify",
    "split_symptom_cell",
]
