# solemap/cli/main.py
from __future__ import annotations

from typing import Optional

from solemap.core.errors import SoleMapError

from solemap.cli.args import parse_args
from solemap.cli.commands import (
    configure_logging,
    cmd_decode,
    cmd_validate,
    cmd_simulate,
    cmd_replay,
)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        if args.cmd == "decode":
            return cmd_decode(args.payload, as_hex=args.hex, as_json=args.json)
        if args.cmd == "validate":
            return cmd_validate(args.line)
        if args.cmd == "simulate":
            return cmd_simulate(args)
        if args.cmd == "replay":
            return cmd_replay(args)

        return 2
    except SoleMapError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
