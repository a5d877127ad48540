#!/usr/bin/env python3
"""Command-line entry point: decode, encode and render I80F48 fields offline."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import ROUND_DOWN, ROUND_HALF_EVEN
from pathlib import Path
from typing import List, Optional

from .config import ToolingConfig, load_config
from .core import (
    LendkitError,
    FormatError,
    ValueKind,
    WrappedI80F48,
    format_raw_token_amount,
    format_token_amount,
    format_value,
    parse_number,
)
from .logging_config import setup_logging
from .reports import account_report, bank_to_readable

logger = logging.getLogger(__name__)

KIND_CHOICES = [k.value for k in ValueKind]


def _parse_wire(text: str) -> WrappedI80F48:
    """Accept 32 hex digits or 16 comma-separated byte values."""
    s = text.strip()
    if "," in s:
        try:
            values = [int(part) for part in s.split(",")]
        except ValueError:
            raise FormatError(f"decode: malformed byte list {text!r}") from None
        return WrappedI80F48.from_list(values)
    if s.lower().startswith("0x"):
        s = s[2:]
    try:
        data = bytes.fromhex(s)
    except ValueError:
        raise FormatError(f"decode: malformed hex {text!r}") from None
    return WrappedI80F48.from_bytes(data)


def _load_json(path: str):
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise FormatError(f"file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise FormatError(f"{path}: {e}") from None


def cmd_decode(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    wrapped = _parse_wire(args.data)
    if args.exact:
        print(str(wrapped))
    else:
        print(format_value(wrapped.to_decimal(), args.kind))
    return 0


def cmd_encode(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    rounding = ROUND_DOWN if args.truncate else ROUND_HALF_EVEN
    wrapped = WrappedI80F48.from_decimal(args.value, rounding)
    print(wrapped.hex())
    print(json.dumps(wrapped.to_list()))
    return 0


def cmd_balance(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    shares = parse_number(args.shares)
    share_value = parse_number(args.share_value)
    print(format_token_amount(shares, share_value, args.decimals))
    return 0


def cmd_amount(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    try:
        native = int(args.native)
    except ValueError:
        raise FormatError(f"amount: native amount must be an integer, got {args.native!r}") from None
    print(format_raw_token_amount(native, args.decimals))
    return 0


def cmd_presets(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    out = {}
    for symbol, token in cfg.tokens.items():
        encoded = token.encoded()
        rates = encoded.pop("interest_rate")
        entry = {name: w.to_list() for name, w in encoded.items()}
        entry["interest_rate"] = {name: w.to_list() for name, w in rates.items()}
        entry["readable"] = token.readable()
        out[symbol] = entry
    print(json.dumps(out, indent=2))
    return 0


def cmd_bank(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    bank = _load_json(args.bank)
    if not isinstance(bank, dict):
        raise FormatError(f"{args.bank}: expected a JSON object, got {type(bank).__name__}")
    print(json.dumps(bank_to_readable(bank, cfg.display.placeholder), indent=2))
    return 0


def cmd_report(args: argparse.Namespace, cfg: ToolingConfig) -> int:
    account = _load_json(args.account)
    banks = _load_json(args.banks)
    if not isinstance(account, dict):
        raise FormatError(f"{args.account}: expected a JSON object, got {type(account).__name__}")
    if not isinstance(banks, dict):
        raise FormatError(f"{args.banks}: expected a JSON object, got {type(banks).__name__}")
    lending = account.get("lendingAccount", {})
    if not isinstance(lending, dict):
        raise FormatError(f"{args.account}: lendingAccount must be an object")
    balances = lending.get("balances", account.get("balances", []))
    if not isinstance(balances, list):
        raise FormatError(f"{args.account}: balances must be a list")
    report = account_report(
        args.address or account.get("address", ""),
        balances,
        banks,
        cfg,
        group=account.get("group", ""),
        authority=account.get("authority", ""),
        account_flags=account.get("accountFlags", 0),
    )
    print(json.dumps(report, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lendkit", description="Offline I80F48 field tooling.")
    parser.add_argument("--config", default=None, help="TOML config file")
    parser.add_argument("--log-level", default=None, help="Override logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("decode", help="Decode 16 wire bytes (hex or comma-separated ints)")
    p.add_argument("data")
    p.add_argument("--kind", choices=KIND_CHOICES, default=ValueKind.DEFAULT.value)
    p.add_argument("--exact", action="store_true", help="Print the exact decimal value")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("encode", help="Encode a decimal value to 16 wire bytes")
    p.add_argument("value")
    p.add_argument("--truncate", action="store_true", help="Round toward zero instead of half-even")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("balance", help="Token amount from shares and share value")
    p.add_argument("--shares", required=True)
    p.add_argument("--share-value", required=True)
    p.add_argument("--decimals", type=int, required=True)
    p.set_defaults(func=cmd_balance)

    p = sub.add_parser("amount", help="Render a native integer token amount")
    p.add_argument("native")
    p.add_argument("--decimals", type=int, required=True)
    p.set_defaults(func=cmd_amount)

    p = sub.add_parser("presets", help="Print encoded risk presets as JSON")
    p.set_defaults(func=cmd_presets)

    p = sub.add_parser("bank", help="Render a bank account JSON file")
    p.add_argument("bank")
    p.set_defaults(func=cmd_bank)

    p = sub.add_parser("report", help="Render a lending account JSON file")
    p.add_argument("account")
    p.add_argument("--banks", required=True, help="JSON object mapping bank address -> bank account")
    p.add_argument("--address", default=None)
    p.set_defaults(func=cmd_report)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
        setup_logging(args.log_level or cfg.logging.level, cfg.logging.format, cfg.logging.file)
        return args.func(args, cfg)
    except LendkitError as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
