# solemap/cli/commands.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Union

from solemap.app.config import load_config
from solemap.app.controller import SoleMapController
from solemap.interfaces.log_sink import LogEntry, LogSink
from solemap.model.reading import FrameEncoding
from solemap.model.summary import SummaryResult
from solemap.protocol.decoder import DecodeFailure, decode_payload
from solemap.protocol.validator import is_well_formed
from solemap.runtime.recorder import SessionOutcome
from solemap.runtime.simulator import SimulatedPeripheral


# ---------------- Display sink ----------------

class PrintLogSink(LogSink):
    """Print display log entries to stderr (stdout carries the JSON result)."""

    def on_log(self, entry: LogEntry) -> None:
        print(entry.render(), file=sys.stderr)

    def on_raw(self, text: str) -> None:
        print(f"[RAW] {text!r}", file=sys.stderr)


# ---------------- Logging ----------------

def configure_logging(*, verbose: bool = False) -> None:
    """
    Add a stderr handler to the root logger (idempotent).
    Kept in CLI (presentation-layer concern).
    """
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING

    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            h.setLevel(level)
            root.setLevel(level)
            return

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(sh)
    root.setLevel(level)


def print_outcome(outcome: SessionOutcome) -> int:
    print(json.dumps(outcome.as_dict(), indent=2))
    return 0 if isinstance(outcome, SummaryResult) else 1


# ---------------- Commands ----------------

def cmd_decode(payload: str, *, as_hex: bool = False, as_json: bool = False) -> int:
    data: Union[str, bytes] = payload
    if as_hex:
        try:
            data = bytes.fromhex(payload)
        except ValueError as e:
            print(f"ERROR: invalid hex payload ({e})")
            return 2

    result = decode_payload(data)
    if isinstance(result, DecodeFailure):
        print(f"FAILED reason={result.reason} size={result.size} payload={result.payload_text!r}")
        return 1

    if as_json:
        print(json.dumps(result.as_dict()))
        return 0

    side = f" side={result.side}" if result.side else ""
    print(f"encoding={result.encoding.value}{side} values={result.format_csv()}")
    return 0


def cmd_validate(line: str) -> int:
    ok = is_well_formed(line)
    print("ok" if ok else "malformed")
    return 0 if ok else 1


def cmd_simulate(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    if args.rate <= 0:
        print("ERROR: --rate must be > 0")
        return 2
    if args.secs is not None and args.secs <= 0:
        print("ERROR: --secs must be > 0")
        return 2

    peripheral = SimulatedPeripheral(
        seed=args.seed,
        encoding=FrameEncoding(args.encoding),
        side=config.side,
    )
    controller = SoleMapController(config, log_sink=PrintLogSink())
    controller.on_connection_change(True, device_name="Simulated peripheral")
    controller.start_measurement(args.secs)

    # one tick per simulated second, `rate` frames in between
    while True:
        for payload in peripheral.payloads(args.rate):
            controller.on_notification(payload)
        outcome = controller.tick()
        if outcome is not None:
            return print_outcome(outcome)


def read_capture(path: Path, *, as_hex: bool = False) -> List[Union[str, bytes]]:
    payloads: List[Union[str, bytes]] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\r\n")
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            payloads.append(bytes.fromhex(line.strip()) if as_hex else line)
    return payloads


def cmd_replay(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    try:
        payloads = read_capture(args.file, as_hex=args.hex)
    except (OSError, ValueError) as e:
        print(f"ERROR: cannot read capture {args.file} ({e})")
        return 2

    controller = SoleMapController(config, log_sink=PrintLogSink())
    controller.on_connection_change(True, device_name=f"replay:{args.file.name}")
    controller.start_measurement()
    for payload in payloads:
        controller.on_notification(payload)
    return print_outcome(controller.stop_measurement())
