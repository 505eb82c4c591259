"""
CLI Tests

Runs the command line entry point on problem files and checks the text and
exit codes it produces.
"""

import copy

import pytest
import yaml

from diagstn.cli import main

from .fixtures import BRANCHED_PROBLEM


@pytest.fixture
def problem_file(tmp_path):
    target = tmp_path / "branched.yml"
    target.write_text(yaml.safe_dump(BRANCHED_PROBLEM), encoding="utf-8")
    return str(target)


@pytest.fixture
def agreeing_file(tmp_path):
    document = copy.deepcopy(BRANCHED_PROBLEM)
    document["observations"] = [{"start": 0, "end": 5, "lb": 55, "ub": 83}]
    target = tmp_path / "agreeing.yml"
    target.write_text(yaml.safe_dump(document), encoding="utf-8")
    return str(target)


class TestDiagnoseCommand:

    def test_lists_diagnoses(self, problem_file, capsys):
        assert main(["diagnose", problem_file]) == 0

        out = capsys.readouterr().out
        assert "=== Diagnosis overview ===" in out
        assert "Diagnosis: 6" in out
        assert "Delta = {d0,1 ∈ [17,19] d-rest = [0,0]}" in out

    @pytest.mark.parametrize("engine", ["stack_analyst", "so_analyst"])
    def test_other_engines_agree(self, problem_file, capsys, engine):
        assert main(["diagnose", problem_file, "--engine", engine]) == 0

        out = capsys.readouterr().out
        assert "Diagnosis: 6" in out
        assert "Diagnosis: 7" not in out

    def test_consistency_based(self, problem_file, capsys):
        main(["diagnose", problem_file, "--consistency-based"])

        out = capsys.readouterr().out
        assert "=== Consistency based diagnosis overview ===" in out
        assert "Abnormal = {d2,3 ˄ } , d-rest = normal" in out

    def test_show_paths_and_weights(self, problem_file, capsys):
        main(["diagnose", problem_file, "--show-paths", "--show-weights"])

        out = capsys.readouterr().out
        assert "=== Path overview ===" in out
        assert "=== Observation per path differences ===" in out
        assert "Change between lb:17 ub:30" in out

    def test_nothing_to_fix(self, agreeing_file, capsys):
        assert main(["diagnose", agreeing_file]) == 0
        assert "[PASS]" in capsys.readouterr().out

    def test_unexplained_disagreement_fails(self, tmp_path, capsys):
        document = {
            "vertices": [{"id": 0}, {"id": 1}],
            "edges": [{"start": 0, "end": 1, "lb": 1, "ub": 2, "contingent": True}],
            "observations": [{"start": 0, "end": 1, "lb": 10, "ub": 12}],
        }
        target = tmp_path / "contingent.yml"
        target.write_text(yaml.safe_dump(document), encoding="utf-8")

        assert main(["diagnose", str(target)]) == 2

        out = capsys.readouterr().out
        assert "[FAIL] No diagnosis reconciles the observations." in out
        assert "[PASS]" not in out

    def test_graph_warnings_are_shown(self, tmp_path, capsys):
        document = copy.deepcopy(BRANCHED_PROBLEM)
        document["edges"][0] = {"start": 1, "end": 0, "lb": -15, "ub": -10}
        target = tmp_path / "reversed.yml"
        target.write_text(yaml.safe_dump(document), encoding="utf-8")

        assert main(["diagnose", str(target)]) == 0

        out = capsys.readouterr().out
        assert "[WARN] REVERSED_EDGE: Negative edge stored as 0->1 [10,15]" in out
        assert "Diagnosis: 6" in out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["diagnose", str(tmp_path / "absent.yml")]) == 1
        assert "[FAIL] PROBLEM_NOT_FOUND" in capsys.readouterr().out


class TestOtherCommands:

    def test_paths(self, problem_file, capsys):
        assert main(["paths", problem_file]) == 0

        out = capsys.readouterr().out
        assert "Observation: 0 to 5" in out
        assert "0 -[10,15]-> 1 -[14,23]-> 2 -[6,12]-> 3 -[25,33]-> 5" in out

    def test_check_reports_disagreement(self, problem_file, capsys):
        assert main(["check", problem_file]) == 2

        out = capsys.readouterr().out
        assert "[*] Vertices: 7  Edges: 6" in out
        assert "[FIX] 0 to 5 observed [85,100] predicted [55,83]" in out

    def test_check_passes(self, agreeing_file, capsys):
        assert main(["check", agreeing_file]) == 0
        assert "[OK] 0 to 5" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "diagnose" in capsys.readouterr().out
