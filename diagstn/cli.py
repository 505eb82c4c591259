"""
Diagnosis CLI
=============

Command line front end for diagnosing problem files.

COMMANDS:
- diagnose: enumerate paths, propagate and list diagnoses
- paths:    list the explaining paths per observation
- check:    network metrics and per-observation predictions

USAGE:
    python -m diagstn diagnose problem.yml --engine stack_analyst --show-paths
"""
import argparse
import logging
import sys
from typing import List, Optional

from .analysis.engine import DiagnosisEngine
from .config import ENGINE_PRESETS, AnalysisConfig
from .contracts.base import Result
from .loader import build_engine, load_problem
from .report import (
    format_con_diagnoses, format_diagnoses, format_paths, format_weights,
)


def _emit(lines: List[str]):
    for line in lines:
        print(line)


def _load_engine(args) -> Optional[DiagnosisEngine]:
    config = AnalysisConfig.preset(getattr(args, "engine", "analyst"))
    loaded: Result = load_problem(args.file)
    if loaded.is_failure:
        print(f"[FAIL] {loaded.error.code.name}: {loaded.error.message}")
        return None
    built = build_engine(loaded.value, config)
    if built.is_failure:
        print(f"[FAIL] {built.error.code.name}: {built.error.message}")
        return None
    return built.value


def _emit_warnings(engine: DiagnosisEngine):
    for entry in engine.graph.log.entries() + engine.log.entries():
        if entry.code is not None:
            print(f"[WARN] {entry.code.name}: {entry.message}")


def cmd_diagnose(args) -> int:
    engine = _load_engine(args)
    if engine is None:
        return 1
    print(f"[*] Diagnosing {args.file} with engine '{args.engine}'")

    engine.generate_paths()
    engine.propagate_weights()
    if args.show_paths:
        _emit(format_paths(engine))
    if args.show_weights:
        _emit(format_weights(engine))

    status = 0
    if args.consistency_based:
        _emit(format_con_diagnoses(engine.generate_con_diagnosis()))
    else:
        diagnoses = engine.generate_diagnosis()
        _emit(format_diagnoses(diagnoses, engine.context))
        if not diagnoses:
            if any(o.fix_needed for o in engine.observations):
                print("[FAIL] No diagnosis reconciles the observations.")
                status = 2
            else:
                print("[PASS] No observation needs a fix.")
    _emit_warnings(engine)
    return status


def cmd_paths(args) -> int:
    engine = _load_engine(args)
    if engine is None:
        return 1
    engine.generate_paths()
    _emit(format_paths(engine))
    return 0


def cmd_check(args) -> int:
    engine = _load_engine(args)
    if engine is None:
        return 1
    metrics = engine.graph.metrics()
    print(f"[*] Vertices: {metrics.vertex_count}  Edges: {metrics.edge_count}")
    print(f"[*] Density: {metrics.density:.3f}  Acyclic: {metrics.is_acyclic}  "
          f"Components: {metrics.weak_components}")

    engine.generate_paths()
    engine.propagate_weights()
    needing_fix = 0
    for observation in engine.observations:
        paths = engine.paths_for(observation)
        predictions = [str(engine.context.prediction_for(p)) for p in paths]
        state = "FIX" if observation.fix_needed else "OK"
        print(f"[{state}] {observation.label} observed {observation.interval} "
              f"predicted {' '.join(predictions) or '-'}")
        needing_fix += observation.fix_needed
    _emit_warnings(engine)

    if needing_fix:
        print(f"[FAIL] {needing_fix} observation(s) disagree with the network.")
        return 2
    print("[PASS] All observations agree with the network.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diagstn",
        description="Simple Temporal Network diagnosis"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show log messages")

    subparsers = parser.add_subparsers(dest="command")

    diagnose_parser = subparsers.add_parser("diagnose", help="List diagnoses")
    diagnose_parser.add_argument("file", help="YAML or JSON problem file")
    diagnose_parser.add_argument(
        "--engine", default="analyst", choices=sorted(ENGINE_PRESETS),
        help="Engine preset"
    )
    diagnose_parser.add_argument("--show-paths", action="store_true", help="Print path overview")
    diagnose_parser.add_argument(
        "--show-weights", action="store_true", help="Print per path differences"
    )
    diagnose_parser.add_argument(
        "--consistency-based", action="store_true",
        help="Consistency based diagnosis without fault model"
    )

    paths_parser = subparsers.add_parser("paths", help="List explaining paths")
    paths_parser.add_argument("file", help="YAML or JSON problem file")

    check_parser = subparsers.add_parser("check", help="Check observations against the network")
    check_parser.add_argument("file", help="YAML or JSON problem file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s"
    )

    if args.command == "diagnose":
        return cmd_diagnose(args)
    elif args.command == "paths":
        return cmd_paths(args)
    elif args.command == "check":
        return cmd_check(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
