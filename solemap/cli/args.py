# solemap/cli/args.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from solemap.runtime.simulator import SIMULATED_ENCODINGS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="solemap")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: packaged metadata/solemap.yml).",
    )

    p_decode = sub.add_parser("decode", help="Decode one notification payload.")
    p_decode.add_argument("payload")
    p_decode.add_argument("--hex", action="store_true", help="Payload is hex-encoded bytes.")
    p_decode.add_argument("--json", action="store_true", help="Print the decoded reading as JSON.")

    p_validate = sub.add_parser("validate", help="Check one console line for telemetry well-formedness.")
    p_validate.add_argument("line")

    p_sim = sub.add_parser("simulate", parents=[common], help="Run a session against a simulated peripheral.")
    p_sim.add_argument("--secs", type=int, default=None, help="Session length (default: config duration_s).")
    p_sim.add_argument("--rate", type=int, default=2, help="Frames per second.")
    p_sim.add_argument("--seed", type=int, default=None)
    p_sim.add_argument(
        "--encoding",
        choices=[e.value for e in SIMULATED_ENCODINGS],
        default="untagged_csv",
    )

    p_replay = sub.add_parser("replay", parents=[common], help="Feed a capture file through one session.")
    p_replay.add_argument("file", type=Path)
    p_replay.add_argument("--hex", action="store_true", help="Each line is hex-encoded bytes.")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
