from decimal import Decimal

import pytest

from lendkit.config import (
    InterestRateConfig,
    TokenRiskConfig,
    ToolingConfig,
    default_token_configs,
    load_config,
)
from lendkit.core.exc import ConfigError


def _write(tmp_path, text):
    p = tmp_path / "lendkit.toml"
    p.write_text(text, encoding="utf-8")
    return str(p)


# -----------------------------
# Defaults and presets
# -----------------------------

def test_defaults_without_file(empty_env):
    print("[config] no file, no env -> defaults with presets")
    cfg = load_config(env=empty_env)
    assert cfg.logging.level == "INFO"
    assert cfg.logging.format == "human"
    assert cfg.display.placeholder == "n/a"
    assert cfg.display.stable_symbols == ["USDC"]
    assert set(cfg.tokens) >= {"USDC", "SOL", "JLP", "USDT"}
    sol = cfg.tokens["SOL"]
    assert sol.decimals == 9
    assert sol.asset_weight_init == Decimal("0.8")
    assert sol.asset_weight_maint == Decimal("0.9")


def test_preset_weights_encode_to_known_bytes():
    print("[config] SOL asset_weight_init encodes to the 0.8 wire pattern")
    sol = default_token_configs()["SOL"]
    enc = sol.encoded()
    assert enc["asset_weight_init"].to_list()[:7] == [205, 204, 204, 204, 204, 204, 0]
    assert enc["interest_rate"]["plateau_interest_rate"].to_decimal() > Decimal("0.0999")


def test_readable_uses_kind_policy():
    sol = default_token_configs()["SOL"]
    r = sol.readable()
    print("[config] SOL readable ->", r)
    assert r["asset_weight_init"] == "0.80"
    assert r["liability_weight_init"] == "1.00"
    assert r["interest_rate"]["plateau_interest_rate"] == "10.00%"
    assert r["interest_rate"]["protocol_ir_fee"] == "5.00%"
    assert InterestRateConfig().readable()["max_interest_rate"] == "200.00%"


def test_symbol_for_mint():
    cfg = ToolingConfig()
    assert cfg.symbol_for_mint("So11111111111111111111111111111111111111112") == "SOL"
    assert cfg.symbol_for_mint("nope") == "Unknown"
    assert TokenRiskConfig(symbol="X").decimals == 6


# -----------------------------
# TOML file
# -----------------------------

def test_toml_overrides(tmp_path, empty_env):
    path = _write(
        tmp_path,
        """
[logging]
level = "DEBUG"
format = "json"

[display]
placeholder = "?"
stable_symbols = ["USDC", "USDT"]

[tokens.SOL]
asset_weight_init = 0.75

[tokens.SOL.interest_rate]
plateau_interest_rate = 0.12

[tokens.NEW]
mint = "NewMint111"
decimals = 8
liability_weight_init = 1.3
""",
    )
    cfg = load_config(path, env=empty_env)
    print("[config] merged ->", cfg.display, cfg.tokens["NEW"])
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.format == "json"
    assert cfg.display.placeholder == "?"
    assert cfg.display.stable_symbols == ["USDC", "USDT"]
    sol = cfg.tokens["SOL"]
    assert sol.asset_weight_init == Decimal("0.75")
    assert sol.asset_weight_maint == Decimal("0.9")
    assert sol.interest_rate.plateau_interest_rate == Decimal("0.12")
    new = cfg.tokens["NEW"]
    assert new.decimals == 8
    assert new.liability_weight_init == Decimal("1.3")
    assert cfg.symbol_for_mint("NewMint111") == "NEW"


def test_env_overrides_file(tmp_path):
    path = _write(tmp_path, '[display]\nplaceholder = "?"\n')
    env = {
        "LENDKIT_PLACEHOLDER": "-",
        "LENDKIT_STABLE_SYMBOLS": "USDC, USDT,",
        "LENDKIT_LOG_LEVEL": "WARNING",
    }
    cfg = load_config(path, env=env)
    assert cfg.display.placeholder == "-"
    assert cfg.display.stable_symbols == ["USDC", "USDT"]
    assert cfg.logging.level == "WARNING"


# -----------------------------
# Errors
# -----------------------------

def test_missing_file_raises(tmp_path, empty_env):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "absent.toml"), env=empty_env)


def test_malformed_toml_raises(tmp_path, empty_env):
    path = _write(tmp_path, "[logging\nlevel = \n")
    with pytest.raises(ConfigError):
        load_config(path, env=empty_env)


@pytest.mark.parametrize(
    "body",
    [
        '[tokens.SOL]\nasset_weight_init = "heavy"\n',
        "[tokens.SOL]\nasset_weight_init = 1e30\n",
        '[tokens.SOL]\ndecimals = "nine"\n',
        "[tokens.SOL]\ndecimals = -1\n",
        "[tokens.SOL.interest_rate]\nmax_interest_rate = inf\n",
        'tokens = { SOL = 1 }\n',
        "[tokens.SOL]\nmint = 42\n",
        "[tokens.SOL]\nasset_weight_init = { a = 1 }\n",
        "[tokens.SOL]\ninterest_rate = 5\n",
    ],
)
def test_invalid_token_values_raise(tmp_path, empty_env, body):
    print(f"[config] invalid body -> ConfigError:\n{body}")
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, body), env=empty_env)


@pytest.mark.parametrize(
    "body",
    [
        '[display]\nstable_symbols = "USDC"\n',
        '[display]\nstable_symbols = ["USDC", 1]\n',
        "[display]\nplaceholder = 0\n",
        "[logging]\nlevel = 10\n",
        "[logging]\nfile = true\n",
    ],
)
def test_invalid_display_and_logging_values_raise(tmp_path, empty_env, body):
    print(f"[config] wrong value type -> ConfigError:\n{body}")
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, body), env=empty_env)


def test_invalid_log_format_raises(empty_env):
    with pytest.raises(ConfigError):
        load_config(env={"LENDKIT_LOG_FMT": "xml"})
