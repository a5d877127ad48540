"""
TOML-based configuration for lendkit tooling.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values. The result is an
explicit ``ToolingConfig`` passed to collaborators; nothing here is stored
in module-level state.

Usage:
    from lendkit.config import load_config
    cfg = load_config("lendkit.toml")
    weights = cfg.tokens["SOL"].encoded()

Example file::

    [logging]
    level = "DEBUG"

    [display]
    placeholder = "?"
    stable_symbols = ["USDC", "USDT"]

    [tokens.SOL]
    asset_weight_init = 0.75

    [tokens.SOL.interest_rate]
    plateau_interest_rate = 0.12
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .core.codec import WrappedI80F48, scale_to_raw, to_decimal_input
from .core.exc import ConfigError, LendkitError
from .core.interpret import ValueKind, format_value
from .logging_config import FORMATS


def _dec(text: str) -> Decimal:
    return Decimal(text)


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: Optional[str] = None


@dataclass
class DisplayConfig:
    """Report rendering settings."""
    placeholder: str = "n/a"
    # Rows for these symbols count toward USD totals at 1:1.
    stable_symbols: list[str] = field(default_factory=lambda: ["USDC"])


@dataclass
class InterestRateConfig:
    """Interest-rate curve parameters and fees, as plain fractions (0.05 = 5%)."""
    optimal_utilization_rate: Decimal = field(default_factory=lambda: _dec("0.8"))
    plateau_interest_rate: Decimal = field(default_factory=lambda: _dec("0.1"))
    max_interest_rate: Decimal = field(default_factory=lambda: _dec("2"))
    insurance_fee_fixed_apr: Decimal = field(default_factory=lambda: _dec("0"))
    insurance_ir_fee: Decimal = field(default_factory=lambda: _dec("0"))
    protocol_fixed_fee_apr: Decimal = field(default_factory=lambda: _dec("0.01"))
    protocol_ir_fee: Decimal = field(default_factory=lambda: _dec("0.05"))

    KINDS = {
        "optimal_utilization_rate": ValueKind.RATE,
        "plateau_interest_rate": ValueKind.RATE,
        "max_interest_rate": ValueKind.RATE,
        "insurance_fee_fixed_apr": ValueKind.FEE,
        "insurance_ir_fee": ValueKind.FEE,
        "protocol_fixed_fee_apr": ValueKind.FEE,
        "protocol_ir_fee": ValueKind.FEE,
    }

    def encoded(self) -> Dict[str, WrappedI80F48]:
        return {name: WrappedI80F48.from_decimal(getattr(self, name)) for name in self.KINDS}

    def readable(self) -> Dict[str, str]:
        return {name: format_value(getattr(self, name), kind) for name, kind in self.KINDS.items()}


@dataclass
class TokenRiskConfig:
    """Per-token bank settings that are written on-chain as I80F48 fields."""
    symbol: str
    mint: str = ""
    decimals: int = 6
    asset_weight_init: Decimal = field(default_factory=lambda: _dec("1"))
    asset_weight_maint: Decimal = field(default_factory=lambda: _dec("1"))
    liability_weight_init: Decimal = field(default_factory=lambda: _dec("1"))
    liability_weight_maint: Decimal = field(default_factory=lambda: _dec("1"))
    interest_rate: InterestRateConfig = field(default_factory=InterestRateConfig)

    WEIGHTS = (
        "asset_weight_init",
        "asset_weight_maint",
        "liability_weight_init",
        "liability_weight_maint",
    )

    def encoded(self) -> Dict[str, Any]:
        """I80F48 fields ready for an instruction payload."""
        out: Dict[str, Any] = {name: WrappedI80F48.from_decimal(getattr(self, name)) for name in self.WEIGHTS}
        out["interest_rate"] = self.interest_rate.encoded()
        return out

    def readable(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"symbol": self.symbol, "mint": self.mint, "decimals": self.decimals}
        for name in self.WEIGHTS:
            out[name] = format_value(getattr(self, name), ValueKind.WEIGHT)
        out["interest_rate"] = self.interest_rate.readable()
        return out


@dataclass
class ToolingConfig:
    """Top-level configuration container."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    tokens: Dict[str, TokenRiskConfig] = field(default_factory=lambda: default_token_configs())

    def symbol_for_mint(self, mint: str) -> str:
        for symbol, token in self.tokens.items():
            if token.mint and token.mint == mint:
                return symbol
        return "Unknown"


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

# (symbol, mint, decimals, asset init, asset maint, liability init, liability maint)
_PRESETS = (
    ("USDC", "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", 6, "1", "1", "1", "1"),
    ("SOL", "So11111111111111111111111111111111111111112", 9, "0.8", "0.9", "1", "1"),
    ("JLP", "27G8MtK7VtTcCHkpASjSDdkWWYfoqT6ggEuKidVJidD4", 6, "0.7", "0.8", "1.23", "1.1"),
    ("JitoSOL", "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn", 9, "0.8", "0.9", "1.23", "1.1"),
    ("sSOL", "sSo14endRuUbvQaJS3dq36Q829a3A6BEfoeeRGJywEh", 9, "0.8", "0.9", "1.23", "1.1"),
    ("JupSOL", "jupSoLaHXQiZZTSfEWMTRRgpnyFm8f6sZdosWBjx93v", 9, "0.8", "0.9", "1.23", "1.1"),
    ("USDS", "USDSwr9ApdHk5bvJKMjzff41FfuX8bSxdKcR81vTwcA", 6, "0.85", "0.9", "1.15", "1.1"),
    ("USDT", "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", 6, "0.85", "0.9", "1.15", "1.1"),
    ("PYUSD", "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo", 6, "0.85", "0.9", "1.15", "1.1"),
)


def default_token_configs() -> Dict[str, TokenRiskConfig]:
    """Risk-weight presets for the supported banks."""
    return {
        symbol: TokenRiskConfig(
            symbol=symbol,
            mint=mint,
            decimals=decimals,
            asset_weight_init=_dec(ai),
            asset_weight_maint=_dec(am),
            liability_weight_init=_dec(li),
            liability_weight_maint=_dec(lm),
        )
        for symbol, mint, decimals, ai, am, li, lm in _PRESETS
    }


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def _to_fixed_field(value: Any, where: str) -> Decimal:
    """Convert a config value to Decimal and check it encodes as I80F48."""
    try:
        d = to_decimal_input(value, where)
        scale_to_raw(d)
    except LendkitError as e:
        raise ConfigError(f"{where}: {e}") from e
    return d


def _merge(dc: Any, raw: Mapping[str, Any], section: str) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    types = {f.name: f.type for f in fields(dc)}
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if key_under not in types:
            continue
        where = f"[{section}] {key}"
        if isinstance(value, dict):
            # Nested tables are merged by the caller.
            if types[key_under] != "InterestRateConfig":
                raise ConfigError(f"{where}: unexpected table")
            continue
        if types[key_under] == "Decimal":
            value = _to_fixed_field(value, where)
        elif types[key_under] == "int" and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"{where}: expected an integer, got {value!r}")
        elif types[key_under] in ("str", "Optional[str]") and not isinstance(value, str):
            raise ConfigError(f"{where}: expected a string, got {value!r}")
        elif types[key_under] == "list[str]" and (
            not isinstance(value, list) or not all(isinstance(v, str) for v in value)
        ):
            raise ConfigError(f"{where}: expected a list of strings, got {value!r}")
        elif types[key_under] == "InterestRateConfig":
            raise ConfigError(f"{where}: expected a table, got {value!r}")
        setattr(dc, key_under, value)


def _merge_tokens(cfg: ToolingConfig, raw_tokens: Mapping[str, Any]) -> None:
    for symbol, raw in raw_tokens.items():
        if not isinstance(raw, dict):
            raise ConfigError(f"[tokens.{symbol}] must be a table")
        token = cfg.tokens.get(symbol) or TokenRiskConfig(symbol=symbol)
        _merge(token, raw, f"tokens.{symbol}")
        if token.decimals < 0:
            raise ConfigError(f"[tokens.{symbol}] decimals must be >= 0")
        if isinstance(raw.get("interest_rate"), dict):
            _merge(token.interest_rate, raw["interest_rate"], f"tokens.{symbol}.interest_rate")
        cfg.tokens[symbol] = token


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> ToolingConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    TOML floats are parsed straight to Decimal, so `0.8` is exactly 0.8.

    Env-var mapping:
        LENDKIT_LOG_LEVEL       -> logging.level
        LENDKIT_LOG_FMT         -> logging.format
        LENDKIT_LOG_FILE        -> logging.file
        LENDKIT_PLACEHOLDER     -> display.placeholder
        LENDKIT_STABLE_SYMBOLS  -> display.stable_symbols   (comma-separated)
    """
    env = os.environ if env is None else env
    cfg = ToolingConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"config file not found: {p}")
        with open(p, "rb") as f:
            try:
                data = tomllib.load(f, parse_float=Decimal)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"{p}: {e}") from e
        for section_name, section_dc in [
            ("logging", cfg.logging),
            ("display", cfg.display),
        ]:
            if section_name in data:
                _merge(section_dc, data[section_name], section_name)
        if "tokens" in data:
            _merge_tokens(cfg, data["tokens"])

    # ── Environment variable overrides ───────────────────────────
    if v := env.get("LENDKIT_LOG_LEVEL"):
        cfg.logging.level = v
    if v := env.get("LENDKIT_LOG_FMT"):
        cfg.logging.format = v
    if v := env.get("LENDKIT_LOG_FILE"):
        cfg.logging.file = v
    if v := env.get("LENDKIT_PLACEHOLDER"):
        cfg.display.placeholder = v
    if v := env.get("LENDKIT_STABLE_SYMBOLS"):
        cfg.display.stable_symbols = [s.strip() for s in v.split(",") if s.strip()]

    if cfg.logging.format not in FORMATS:
        raise ConfigError(f"logging.format must be one of {FORMATS}, got {cfg.logging.format!r}")
    return cfg
