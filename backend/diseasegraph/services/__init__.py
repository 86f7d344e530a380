"""
Services package initialization.
"""

from diseasegraph.services.graph_builder import GraphBuilder, GraphBuildError
from diseasegraph.services.graph_runtime import GraphLoadError, GraphRuntimeEngine
from diseasegraph.services.layout_engine import LayoutConfig, LayoutEngine
from diseasegraph.services.risk_classifier import classify_risk

__all__ = [
    "GraphBuilder",
    "GraphBuildError",
    "GraphLoadError",
    "GraphRuntimeEngine",
    "LayoutConfig",
    "LayoutEngine",
    "classify_risk",
]
