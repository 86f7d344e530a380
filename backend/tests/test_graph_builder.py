"""
Test the CSV to graph document builder and its command line entry point.
"""

import json
import logging

import pytest

from diseasegraph import cli
from diseasegraph.services.graph_builder import (
    GraphBuilder,
    GraphBuildError,
    build_graph_file,
    load_precautions,
    parse_csv,
    parse_precautions,
    resolve_columns,
    write_graph,
)


def _edges(document):
    return {(e.source, e.target): e.weight for e in document.edges}


def test_parse_csv_pads_and_trims():
    """Test positional comma splitting with CRLF and blank lines."""
    headers, rows = parse_csv("Disease , Symptom_1,Symptom_2\r\n\r\nFlu, fever \nCold,a,b,c\n")
    assert headers == ["Disease", "Symptom_1", "Symptom_2"]
    assert rows == [
        {"Disease": "Flu", "Symptom_1": "fever", "Symptom_2": ""},
        {"Disease": "Cold", "Symptom_1": "a", "Symptom_2": "b"},
    ]


def test_parse_csv_empty_input():
    with pytest.raises(GraphBuildError):
        parse_csv("\n\n")


def test_resolve_columns_explicit_and_implicit():
    """Test disease/symptom column role detection."""
    roles = resolve_columns(["disease_name", "Symptom_1", "SYMPTOM_2", "Notes"])
    assert roles.disease == "disease_name"
    assert roles.symptoms == ("Symptom_1", "SYMPTOM_2")
    assert roles.implicit_symptoms is False

    roles = resolve_columns(["Disease", "a", "b"])
    assert roles.symptoms == ("a", "b")
    assert roles.implicit_symptoms is True


def test_resolve_columns_without_disease_lists_columns():
    with pytest.raises(GraphBuildError) as excinfo:
        resolve_columns(["Name", "Symptom_1"])
    assert "Could not detect disease column" in str(excinfo.value)
    assert "Symptom_1" in str(excinfo.value)


def test_flu_example():
    """Two Flu rows: fever in both, cough in one."""
    content = "Disease,Symptom_1,Symptom_2\nFlu,fever,cough\nFlu,fever,\n"
    document = GraphBuilder().build_from_csv(content)

    payload = document.to_json_dict()
    assert payload["nodes"] == [
        {"id": "flu", "name": "Flu", "category": "disease"},
        {"id": "fever", "name": "fever", "category": "symptom"},
        {"id": "cough", "name": "cough", "category": "symptom"},
    ]
    assert payload["edges"] == [
        {"source": "flu", "target": "fever", "type": "symptom_of", "weight": 1.0},
        {"source": "flu", "target": "cough", "type": "symptom_of", "weight": 0.5},
    ]


def test_node_order_diseases_then_symptoms(symptom_csv):
    document = GraphBuilder().build_from_csv(symptom_csv)
    ids = [n.id for n in document.nodes]
    assert ids == [
        "flu", "common_cold", "migraine",
        "fever", "cough", "sneezing", "runny_nose", "headache", "nausea",
    ]
    assert _edges(document)[("common_cold", "sneezing")] == 1.0
    assert _edges(document)[("common_cold", "runny_nose")] == 0.5


def test_rows_without_disease_are_skipped():
    """Test that an empty disease value contributes nothing."""
    content = "Disease,Symptom_1\nFlu,fever\n,chills\n  ,rash\nFlu,cough\n"
    document = GraphBuilder().build_from_csv(content)
    ids = {n.id for n in document.nodes}
    assert "chills" not in ids
    assert "rash" not in ids
    assert _edges(document) == {("flu", "fever"): 0.5, ("flu", "cough"): 0.5}


def test_names_with_same_slug_merge():
    """Two spellings of one disease become one node; last name wins."""
    content = "Disease,Symptom_1\nFlu,fever\nFLU,cough\nflu ,fever\n"
    document = GraphBuilder().build_from_csv(content)
    diseases = [n for n in document.nodes if n.category == "disease"]
    assert len(diseases) == 1
    assert diseases[0].id == "flu"
    assert diseases[0].name == "flu"
    assert _edges(document) == {("flu", "fever"): 0.667, ("flu", "cough"): 0.333}


def test_multi_value_cells_count_every_mention():
    content = "Disease,Symptom_1,Symptom_2\nFlu,fever;cough|chills,\nFlu,fever,fever\nFlu,,\nFlu,,\n"
    document = GraphBuilder().build_from_csv(content)
    edges = _edges(document)
    assert edges[("flu", "fever")] == 0.75
    assert edges[("flu", "cough")] == 0.25
    assert edges[("flu", "chills")] == 0.25


def test_weights_stay_in_unit_range():
    content = "Disease,Symptom_1\nFlu,fever;fever;fever\n"
    document = GraphBuilder().build_from_csv(content)
    for edge in document.edges:
        assert 0.0 <= edge.weight <= 1.0
    assert _edges(document)[("flu", "fever")] == 1.0


def test_implicit_symptom_mode():
    """Without symptom headers every other column carries symptoms."""
    content = "Disease,A,B\nFlu,fever,cough\nFlu,fever,\n"
    document = GraphBuilder().build_from_csv(content)
    assert _edges(document) == {("flu", "fever"): 1.0, ("flu", "cough"): 0.5}


def test_precautions_attach_by_exact_name(symptom_csv, precautions_csv):
    precautions = parse_precautions(precautions_csv)
    assert precautions == {"Flu": ["rest", "drink fluids"], "Migraine": ["dark room"]}

    document = GraphBuilder(precautions).build_from_csv(symptom_csv)
    by_id = {n.id: n for n in document.nodes}
    assert by_id["flu"].precautions == ["rest", "drink fluids"]
    assert by_id["migraine"].precautions == ["dark room"]
    assert by_id["common_cold"].precautions is None
    assert "precautions" not in document.to_json_dict()["nodes"][1]


def test_precautions_are_case_sensitive(symptom_csv):
    document = GraphBuilder({"flu": ["rest"]}).build_from_csv(symptom_csv)
    by_id = {n.id: n for n in document.nodes}
    assert by_id["flu"].precautions is None


def test_missing_precautions_file_warns(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        assert load_precautions(tmp_path / "missing.csv") == {}
    assert "continuing without precautions" in caplog.text


def test_unparseable_precautions_file_warns(tmp_path, caplog):
    path = tmp_path / "precautions.csv"
    path.write_text("Name,Precaution_1\nFlu,rest\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        assert load_precautions(path) == {}
    assert "ignoring" in caplog.text


def test_build_graph_file_missing_input(tmp_path):
    with pytest.raises(GraphBuildError) as excinfo:
        build_graph_file(tmp_path / "nope.csv")
    assert "does not exist" in str(excinfo.value)


def test_write_graph_with_sync(tmp_path, symptom_csv):
    document = GraphBuilder().build_from_csv(symptom_csv)
    output = tmp_path / "public" / "data" / "graph.json"
    sync = tmp_path / "functions" / "graph.json"

    write_graph(document, output, sync_path=sync)

    assert json.loads(output.read_text(encoding="utf-8")) == document.to_json_dict()
    assert sync.read_text(encoding="utf-8") == output.read_text(encoding="utf-8")


# ── CLI ───────────────────────────────────────────────────────────────────


@pytest.fixture
def csv_files(tmp_path, symptom_csv, precautions_csv):
    symptoms = tmp_path / "DiseaseAndSymptoms.csv"
    symptoms.write_text(symptom_csv, encoding="utf-8")
    precautions = tmp_path / "Disease precaution.csv"
    precautions.write_text(precautions_csv, encoding="utf-8")
    return symptoms, precautions


def test_cli_writes_graph(tmp_path, csv_files):
    symptoms, precautions = csv_files
    output = tmp_path / "out" / "graph.json"
    code = cli.main(
        ["--input", str(symptoms), "--precautions", str(precautions),
         "--output", str(output)]
    )
    assert code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["nodes"][0] == {
        "id": "flu", "name": "Flu", "category": "disease",
        "precautions": ["rest", "drink fluids"],
    }


def test_cli_sync_to_function(tmp_path, csv_files, monkeypatch, settings):
    symptoms, _ = csv_files
    sync_target = tmp_path / "supabase" / "graph.json"
    monkeypatch.setattr(settings, "function_graph_path", str(sync_target))
    output = tmp_path / "graph.json"

    code = cli.main(["--input", str(symptoms), "--output", str(output), "--syncToFunction"])

    assert code == 0
    assert sync_target.exists()


def test_cli_missing_input_flag(capsys):
    assert cli.main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_cli_input_flag_without_value(capsys):
    assert cli.main(["--input"]) == 1
    assert "Usage" in capsys.readouterr().err


def test_cli_ignores_unknown_flags(tmp_path, csv_files):
    symptoms, _ = csv_files
    output = tmp_path / "graph.json"
    code = cli.main(
        ["--input", str(symptoms), "--output", str(output), "--verbose"]
    )
    assert code == 0
    assert output.exists()


def test_cli_does_not_expand_abbreviations(tmp_path, csv_files):
    symptoms, _ = csv_files
    output = tmp_path / "graph.json"
    code = cli.main(["--inp", str(symptoms), "--output", str(output)])
    assert code == 1
    assert not output.exists()


def test_cli_unreadable_input(tmp_path):
    output = tmp_path / "graph.json"
    code = cli.main(["--input", str(tmp_path / "missing.csv"), "--output", str(output)])
    assert code == 1
    assert not output.exists()


def test_cli_undetectable_disease_column(tmp_path):
    source = tmp_path / "bad.csv"
    source.write_text("Name,Symptom_1\nFlu,fever\n", encoding="utf-8")
    output = tmp_path / "graph.json"
    assert cli.main(["--input", str(source), "--output", str(output)]) == 1
    assert not output.exists()


def test_cli_bad_precautions_still_succeeds(tmp_path, csv_files):
    symptoms, _ = csv_files
    output = tmp_path / "graph.json"
    code = cli.main(
        ["--input", str(symptoms), "--precautions", str(tmp_path / "none.csv"),
         "--output", str(output)]
    )
    assert code == 0
    assert output.exists()
