"""
Risk Classifier: labels every node against the patient's active conditions.

Classification is recomputed from scratch on every call and depends only on
(nodes, edges, active conditions). Unknown ids in the active set are ignored.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Set

from ..schemas.graph import GraphEdge, GraphNode, NodeCategory, RiskLevel

logger = logging.getLogger(__name__)

HIGH_OVERLAP = 0.5
MEDIUM_OVERLAP = 0.2


class NodeRisk(NamedTuple):
    """Risk level and active flag of one node."""

    risk: RiskLevel
    active: bool


def build_symptom_profiles(
    nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]
) -> Dict[str, Set[str]]:
    """
    Map each disease id to the set of symptom ids it links to.

    Every disease node gets an entry, even without edges.
    """
    profiles: Dict[str, Set[str]] = {
        node.id: set() for node in nodes if node.category == NodeCategory.DISEASE
    }
    for edge in edges:
        if edge.type != "symptom_of":
            continue
        profiles.setdefault(edge.source, set()).add(edge.target)
    return profiles


def collect_active_symptoms(
    profiles: Dict[str, Set[str]], active_conditions: Iterable[str]
) -> Set[str]:
    """Union of the symptom profiles of every active disease."""
    active_symptoms: Set[str] = set()
    for condition_id in active_conditions:
        active_symptoms |= profiles.get(condition_id, set())
    return active_symptoms


def overlap_risk(profile: Set[str], active_symptoms: Set[str]) -> RiskLevel:
    """Risk of an inactive disease from the share of its profile already implied."""
    if not profile:
        return RiskLevel.NEUTRAL
    ratio = len(profile & active_symptoms) / len(profile)
    if ratio >= HIGH_OVERLAP:
        return RiskLevel.HIGH
    if ratio >= MEDIUM_OVERLAP:
        return RiskLevel.MEDIUM
    if ratio > 0:
        return RiskLevel.LOW
    return RiskLevel.NEUTRAL


def classify_risk(
    nodes: List[GraphNode],
    edges: List[GraphEdge],
    active_conditions: Iterable[str],
) -> Dict[str, NodeRisk]:
    """
    Assign a risk level and active flag to every node.

    Diseases: active ones are high risk; inactive ones are graded by how much
    of their symptom profile overlaps the symptoms of the active diseases
    (>= 0.5 high, >= 0.2 medium, > 0 low). Symptoms are low risk when an
    active disease links to them.

    Args:
        nodes: Graph nodes
        edges: Graph edges
        active_conditions: Condition ids the patient reports

    Returns:
        node id → NodeRisk, in node order
    """
    active = set(active_conditions)
    profiles = build_symptom_profiles(nodes, edges)
    active_symptoms = collect_active_symptoms(profiles, active)
    targeted = {
        edge.target
        for edge in edges
        if edge.type == "symptom_of" and edge.source in active
    }

    result: Dict[str, NodeRisk] = {}
    for node in nodes:
        is_active = node.id in active
        if node.id in profiles:
            if is_active:
                risk = RiskLevel.HIGH
            else:
                risk = overlap_risk(profiles[node.id], active_symptoms)
        else:
            risk = RiskLevel.LOW if node.id in targeted else RiskLevel.NEUTRAL
        result[node.id] = NodeRisk(risk, is_active)

    if active:
        at_risk = sum(1 for r in result.values() if r.risk != RiskLevel.NEUTRAL)
        logger.debug(
            f"Classified {len(result)} nodes for {len(active)} active ids, "
            f"{at_risk} at risk"
        )
    return result
