"""
Problem Loader Tests

YAML and JSON documents, and the failures reported for broken ones.
"""

import copy
import json

import yaml

from diagstn.config import AnalysisConfig
from diagstn.contracts.base import ErrorCode
from diagstn.loader import build_engine, load_problem, parse_problem

from .fixtures import BRANCHED_DIAGNOSES, BRANCHED_PROBLEM, as_plain


def problem_document(**changes):
    document = copy.deepcopy(BRANCHED_PROBLEM)
    document.update(changes)
    return document


class TestLoadFiles:

    def test_yaml_file(self, tmp_path):
        target = tmp_path / "branched.yml"
        target.write_text(yaml.safe_dump(BRANCHED_PROBLEM), encoding="utf-8")

        result = load_problem(target)

        assert result.is_success
        problem = result.value
        assert len(problem.graph.vertices) == 7
        assert len(problem.graph.edges) == 6
        assert [o.label for o in problem.observations] == ["0 to 5", "0 to 6"]
        assert problem.source == str(target)

    def test_json_file(self, tmp_path):
        target = tmp_path / "branched.json"
        target.write_text(json.dumps(BRANCHED_PROBLEM), encoding="utf-8")

        result = load_problem(target)

        assert result.is_success
        assert len(result.value.observations) == 2

    def test_missing_file(self, tmp_path):
        result = load_problem(tmp_path / "absent.yml")
        assert result.error.code == ErrorCode.PROBLEM_NOT_FOUND

    def test_unparsable_file(self, tmp_path):
        target = tmp_path / "broken.json"
        target.write_text("{not json", encoding="utf-8")
        assert load_problem(target).error.code == ErrorCode.MALFORMED_PROBLEM


class TestParseProblem:

    def test_document_must_be_mapping(self):
        assert parse_problem([1, 2]).error.code == ErrorCode.MALFORMED_PROBLEM

    def test_section_must_be_list(self):
        result = parse_problem(problem_document(edges={"start": 0}))
        assert result.error.code == ErrorCode.MALFORMED_PROBLEM
        assert result.error.context_value("section") == "edges"

    def test_missing_section(self):
        document = problem_document()
        del document["observations"]
        assert parse_problem(document).error.code == ErrorCode.MALFORMED_PROBLEM

    def test_missing_field(self):
        document = problem_document()
        del document["edges"][0]["ub"]
        assert parse_problem(document).error.code == ErrorCode.MALFORMED_PROBLEM

    def test_non_numeric_bound(self):
        document = problem_document()
        document["observations"][0]["lb"] = "early"
        assert parse_problem(document).error.code == ErrorCode.MALFORMED_PROBLEM

    def test_unknown_edge_vertex(self):
        document = problem_document()
        document["edges"].append({"start": 0, "end": 40, "lb": 1, "ub": 2})
        assert parse_problem(document).error.code == ErrorCode.VERTEX_NOT_FOUND

    def test_fixed_times(self):
        result = parse_problem(problem_document(fixed_times=[{"vertex": 0, "time": 10}]))
        assert result.value.fixed_times == {0: 10}

    def test_duplicate_fixed_time(self):
        result = parse_problem(problem_document(fixed_times=[
            {"vertex": 0, "time": 10}, {"vertex": 0, "time": 20},
        ]))
        assert result.error.code == ErrorCode.DUPLICATE_FIXED_TIME


class TestBuildEngine:

    def test_engine_runs_loaded_problem(self):
        problem = parse_problem(BRANCHED_PROBLEM).value

        engine = build_engine(problem, AnalysisConfig.preset("stack_analyst")).value

        assert as_plain(engine.run()) == BRANCHED_DIAGNOSES

    def test_fixed_times_are_registered(self):
        problem = parse_problem(
            problem_document(fixed_times=[{"vertex": 0, "time": 10}])
        ).value

        engine = build_engine(problem).value

        assert engine.fixed_times == {0: 10}
