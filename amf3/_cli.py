"""amf3 command-line interface.

Usage:
    python3 -m amf3 pp FILE            pretty-print FILE as JSON
    cat FILE | python3 -m amf3 pp      read from stdin
    echo 06 03 61 | python3 -m amf3 pp --hex
    python3 -m amf3 version
"""

from __future__ import annotations

import argparse
import binascii
import json
import sys
from typing import List, Optional

from . import Amf3Error, __version__, decode_value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amf3",
        description="amf3: decode AMF3-encoded values",
    )
    sub = parser.add_subparsers(dest="command")

    # ── pp ──
    pp_p = sub.add_parser("pp", help="Decode and pretty-print as JSON")
    pp_p.add_argument("path", nargs="?", metavar="FILE",
                      help="Read AMF3 bytes from FILE instead of stdin")
    pp_p.add_argument("--hex", action="store_true",
                      help="Input is hex text (whitespace ignored)")
    pp_p.add_argument("--indent", type=int, default=2,
                      help="JSON indent width (default 2)")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read raw bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("amf3: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_pp(args: argparse.Namespace) -> None:
    raw = _read_input(args.path)
    if args.hex:
        raw = binascii.unhexlify(b"".join(raw.split()))
    value = decode_value(raw)
    # Dense indices of mixed arrays become JSON string keys.
    print(json.dumps(value, indent=args.indent, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"amf3 {__version__}")
        return

    try:
        if args.command == "pp":
            _cmd_pp(args)
    except Amf3Error as e:
        print(f"amf3: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except binascii.Error as e:
        print(f"amf3: hex parse error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
