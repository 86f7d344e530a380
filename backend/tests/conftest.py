"""
Basic test configuration and fixtures.
"""

import json

import pytest
from fastapi.testclient import TestClient

from diseasegraph.core.dependencies import get_graph_engine
from diseasegraph.main import app
from diseasegraph.schemas.graph import GraphDocument
from diseasegraph.services.graph_runtime import GraphRuntimeEngine
from diseasegraph.services.layout_engine import LayoutConfig

SYMPTOM_CSV = (
    "Disease,Symptom_1,Symptom_2,Symptom_3\n"
    "Flu,fever,cough,\n"
    "Flu,fever,,\n"
    "Common Cold,cough,sneezing,runny nose\n"
    "Common Cold,sneezing,,\n"
    "Migraine,headache,nausea,\n"
)

PRECAUTIONS_CSV = (
    "Disease,Precaution_1,Precaution_2,Precaution_3\n"
    "Flu,rest,drink fluids,\n"
    "Migraine,dark room,,\n"
)


@pytest.fixture
def symptom_csv():
    """Disease/symptom table with three diseases."""
    return SYMPTOM_CSV


@pytest.fixture
def precautions_csv():
    """Precautions for two of the three diseases."""
    return PRECAUTIONS_CSV


@pytest.fixture
def graph_payload():
    """Small two-disease graph in document form."""
    return {
        "nodes": [
            {"id": "d1", "name": "Disease One", "category": "disease",
             "precautions": ["rest"]},
            {"id": "d2", "name": "Disease Two", "category": "disease"},
            {"id": "s1", "name": "Symptom One", "category": "symptom"},
            {"id": "s2", "name": "Symptom Two", "category": "symptom"},
            {"id": "s3", "name": "Symptom Three", "category": "symptom"},
        ],
        "edges": [
            {"source": "d1", "target": "s1", "type": "symptom_of", "weight": 1.0},
            {"source": "d1", "target": "s2", "type": "symptom_of", "weight": 0.5},
            {"source": "d2", "target": "s2", "type": "symptom_of", "weight": 0.75},
            {"source": "d2", "target": "s3", "type": "symptom_of", "weight": 0.25},
        ],
    }


@pytest.fixture
def graph_document(graph_payload):
    """Parsed graph document."""
    return GraphDocument.model_validate(graph_payload)


@pytest.fixture
def graph_file(tmp_path, graph_payload):
    """Graph document written to disk."""
    path = tmp_path / "disease_symptom_graph.json"
    path.write_text(json.dumps(graph_payload), encoding="utf-8")
    return path


@pytest.fixture
def engine(graph_file):
    """Runtime engine loaded from the graph file."""
    runtime = GraphRuntimeEngine(layout_config=LayoutConfig(seed=7))
    runtime.load(graph_file)
    yield runtime
    runtime.close()


@pytest.fixture
def client(engine):
    """Test client fixture bound to the test engine."""
    app.dependency_overrides[get_graph_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    """Settings fixture for testing."""
    from diseasegraph.core.config import get_settings

    return get_settings()
