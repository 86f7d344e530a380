"""
Graph Builder: turns a disease/symptom CSV into the canonical graph document.

Processing contract:
  1. The CSV is split line by line and every line on raw commas. Quoted fields
     are not understood; a comma inside a name shifts the remaining cells.
  2. Column roles are resolved once from the header: the first header that
     mentions "disease" names the disease, every header mentioning "symptom"
     holds symptoms. Without symptom headers every other column is a symptom
     column ("implicit symptom mode").
  3. Symptom cells may hold several names separated by ``;``, ``|`` or ``,``.
  4. Each disease keeps a row count and a per-symptom occurrence count. Every
     mention counts, so a duplicated symptom in one row counts twice.
     ``weight = occurrences / rows`` rounded to 3 decimals, capped at 1.0.
  5. Precautions attach by exact display-name match and are optional: any
     problem with that file is logged and ignored.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

from ..schemas.graph import GraphDocument, GraphEdge, GraphNode, NodeCategory
from ..utils.file_utils import read_text_file, write_json_file
from ..utils.normalization import round_half_up, slugify, split_symptom_cell

logger = logging.getLogger(__name__)

RawRow = Dict[str, str]

_LINE_BREAK = re.compile(r"\r?\n")
_DISEASE_HEADER = re.compile(r"disease", re.IGNORECASE)
_SYMPTOM_HEADER = re.compile(r"symptom", re.IGNORECASE)
_PRECAUTION_HEADER = re.compile(r"precaution", re.IGNORECASE)


class GraphBuildError(Exception):
    """Fatal builder error: the input cannot produce a graph."""


class ColumnRoles(NamedTuple):
    """Which header holds the disease and which hold symptoms."""

    disease: str
    symptoms: Tuple[str, ...]
    implicit_symptoms: bool


class DiseaseStats:
    """Row count and symptom occurrence counts for one disease id."""

    def __init__(self, disease_id: str, name: str):
        self.disease_id = disease_id
        self.name = name
        self.rows = 0
        self.symptom_counts: Dict[str, int] = {}

    def weight(self, symptom_id: str) -> float:
        ratio = self.symptom_counts[symptom_id] / self.rows
        return min(1.0, round_half_up(ratio, 3))


# ──────────────────────────────────────────────────────────────────────────────
# CSV parsing
# ──────────────────────────────────────────────────────────────────────────────


def parse_csv(content: str) -> Tuple[List[str], List[RawRow]]:
    """
    Parse comma-separated text into headers and raw rows.

    Empty lines are dropped. Cells are trimmed and missing trailing cells
    become empty strings; extra cells beyond the header are ignored.

    Args:
        content: Whole file content

    Returns:
        (headers, rows) where each row maps header → cell value

    Raises:
        GraphBuildError: If the content has no header line
    """
    lines = [line for line in _LINE_BREAK.split(content) if line]
    if not lines:
        raise GraphBuildError("CSV input is empty, no header line found")

    headers = [header.strip() for header in lines[0].split(",")]
    rows: List[RawRow] = []
    for line in lines[1:]:
        parts = [part.strip() for part in line.split(",")]
        row: RawRow = {}
        for index, header in enumerate(headers):
            row[header] = parts[index] if index < len(parts) else ""
        rows.append(row)
    return headers, rows


def _unique_headers(headers: List[str]) -> List[str]:
    return list(dict.fromkeys(headers))


def resolve_columns(headers: List[str]) -> ColumnRoles:
    """
    Detect the disease column and the symptom columns of a header line.

    Raises:
        GraphBuildError: If no header mentions "disease"
    """
    columns = _unique_headers(headers)
    disease = next((h for h in columns if _DISEASE_HEADER.search(h)), None)
    if disease is None:
        raise GraphBuildError(
            f"Could not detect disease column. Columns: {columns}"
        )

    symptoms = tuple(h for h in columns if _SYMPTOM_HEADER.search(h))
    if symptoms:
        return ColumnRoles(disease, symptoms, implicit_symptoms=False)

    others = tuple(h for h in columns if h != disease)
    return ColumnRoles(disease, others, implicit_symptoms=True)


# ──────────────────────────────────────────────────────────────────────────────
# Precautions
# ──────────────────────────────────────────────────────────────────────────────


def parse_precautions(content: str) -> Dict[str, List[str]]:
    """
    Map disease display name → ordered non-empty precautions.

    Rows without a disease value or without any precaution are ignored; a
    later row for the same disease replaces an earlier one.

    Raises:
        GraphBuildError: If the table is empty or has no disease column
    """
    headers, rows = parse_csv(content)
    columns = _unique_headers(headers)
    disease_col = next((h for h in columns if _DISEASE_HEADER.search(h)), None)
    if disease_col is None:
        raise GraphBuildError(
            f"Could not detect disease column in precautions. Columns: {columns}"
        )
    precaution_cols = [h for h in columns if _PRECAUTION_HEADER.search(h)]

    precautions: Dict[str, List[str]] = {}
    for row in rows:
        disease = row.get(disease_col, "").strip()
        if not disease:
            continue
        values = [row.get(c, "").strip() for c in precaution_cols]
        values = [v for v in values if v]
        if values:
            precautions[disease] = values
    return precautions


def load_precautions(path: Union[str, Path]) -> Dict[str, List[str]]:
    """
    Load the optional precautions table.

    Never raises: a missing, unreadable or malformed file is logged as a
    warning and yields an empty mapping.
    """
    precautions_path = Path(path).resolve()
    if not precautions_path.exists():
        logger.warning(
            f"Precautions file not found at {precautions_path} - "
            "continuing without precautions"
        )
        return {}

    try:
        content = read_text_file(precautions_path)
        precautions = parse_precautions(content)
    except (OSError, UnicodeDecodeError, GraphBuildError) as exc:
        logger.warning(f"Error parsing precautions file, ignoring: {exc}")
        return {}

    logger.info(f"Loaded precautions for {len(precautions)} diseases")
    return precautions


# ──────────────────────────────────────────────────────────────────────────────
# Builder
# ──────────────────────────────────────────────────────────────────────────────


class GraphBuilder:
    """Aggregates raw rows into disease/symptom nodes and weighted edges."""

    def __init__(self, precautions: Optional[Dict[str, List[str]]] = None):
        self.precautions = precautions or {}
        self._diseases: Dict[str, DiseaseStats] = {}
        self._symptoms: Dict[str, str] = {}

    # ── Public entry points ────────────────────────────────────────────────

    def build_from_csv(self, content: str) -> GraphDocument:
        """Parse, resolve columns, aggregate and assemble a graph document."""
        headers, rows = parse_csv(content)
        roles = resolve_columns(headers)
        if roles.implicit_symptoms:
            logger.info(
                "No symptom columns found, treating every non-disease "
                f"column as a symptom: {list(roles.symptoms)}"
            )
        self.aggregate(rows, roles)
        return self.build()

    def aggregate(self, rows: List[RawRow], roles: ColumnRoles) -> None:
        """Accumulate row counts and symptom occurrences per disease."""
        skipped = 0
        for row in rows:
            disease_name = row.get(roles.disease, "").strip()
            disease_id = slugify(disease_name)
            if not disease_id:
                skipped += 1
                continue

            stats = self._diseases.get(disease_id)
            if stats is None:
                stats = DiseaseStats(disease_id, disease_name)
                self._diseases[disease_id] = stats
            stats.name = disease_name
            stats.rows += 1

            for cell in self._symptom_cells(row, roles):
                for symptom in split_symptom_cell(cell):
                    symptom_id = slugify(symptom)
                    if not symptom_id:
                        continue
                    self._symptoms[symptom_id] = symptom
                    stats.symptom_counts[symptom_id] = (
                        stats.symptom_counts.get(symptom_id, 0) + 1
                    )

        if skipped:
            logger.debug(f"Skipped {skipped} rows without a disease value")

    def build(self) -> GraphDocument:
        """Assemble the document from the aggregated counts."""
        disease_nodes: List[GraphNode] = []
        edges: List[GraphEdge] = []

        for stats in self._diseases.values():
            disease_nodes.append(
                GraphNode(
                    id=stats.disease_id,
                    name=stats.name,
                    category=NodeCategory.DISEASE,
                    precautions=self.precautions.get(stats.name),
                )
            )
            for symptom_id, count in stats.symptom_counts.items():
                if count > stats.rows:
                    logger.warning(
                        f"{stats.name}: '{symptom_id}' mentioned {count} times "
                        f"in {stats.rows} rows, weight capped at 1.0"
                    )
                edges.append(
                    GraphEdge(
                        source=stats.disease_id,
                        target=symptom_id,
                        weight=stats.weight(symptom_id),
                    )
                )

        symptom_nodes = [
            GraphNode(id=symptom_id, name=name, category=NodeCategory.SYMPTOM)
            for symptom_id, name in self._symptoms.items()
        ]

        logger.info(
            f"Graph built: {len(disease_nodes)} diseases, "
            f"{len(symptom_nodes)} symptoms, {len(edges)} edges"
        )
        return GraphDocument(nodes=disease_nodes + symptom_nodes, edges=edges)

    # ── Helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def _symptom_cells(row: RawRow, roles: ColumnRoles) -> List[str]:
        cells = (row.get(column, "").strip() for column in roles.symptoms)
        return [cell for cell in cells if cell]


# ──────────────────────────────────────────────────────────────────────────────
# File-level pipeline
# ──────────────────────────────────────────────────────────────────────────────


def build_graph_file(
    input_path: Union[str, Path],
    precautions_path: Optional[Union[str, Path]] = None,
) -> GraphDocument:
    """
    Read the primary CSV (and optional precautions CSV) and build the graph.

    Raises:
        GraphBuildError: If the input is missing, unreadable or has no
            disease column
    """
    path = Path(input_path).resolve()
    try:
        content = read_text_file(path)
    except FileNotFoundError:
        raise GraphBuildError(f"Input file does not exist: {path}")
    except (OSError, UnicodeDecodeError) as exc:
        raise GraphBuildError(f"Could not read input file {path}: {exc}")

    precautions = load_precautions(precautions_path) if precautions_path else {}
    return GraphBuilder(precautions).build_from_csv(content)


def write_graph(
    document: GraphDocument,
    output_path: Union[str, Path],
    sync_path: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Write the document, and optionally a duplicate for a second consumer.

    A failure writing the duplicate only warns.

    Returns:
        The resolved primary output path
    """
    payload = document.to_json_dict()
    written = write_json_file(output_path, payload)
    logger.info(f"Graph written to {written}")

    if sync_path:
        try:
            synced = write_json_file(sync_path, payload)
            logger.info(f"Also wrote graph to {synced}")
        except OSError as exc:
            logger.warning(f"Could not sync graph to {sync_path}: {exc}")

    return written
