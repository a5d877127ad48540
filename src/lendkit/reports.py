"""
Operator-facing reports for bank and lending-account state.

Inputs are the JSON shapes produced by IDL account decoders (camelCase keys,
I80F48 fields as `{"value": [u8; 16]}`); fetching the accounts is the
caller's job. Every field is rendered through `render_or_placeholder`, so a
malformed field becomes a placeholder and is logged instead of aborting the
whole report. Totals are accumulated in exact Decimal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, localcontext
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .core import (
    U64_MAX,
    FormatError,
    ValueKind,
    WrappedI80F48,
    compute_token_amount,
    format_token_amount,
    format_value,
    format_wrapped,
    render_or_placeholder,
    to_fixed,
)
from .core.balance import DEFAULT_PLACEHOLDER
from .core.constants import EXACT_DIGITS
from .config import ToolingConfig

logger = logging.getLogger(__name__)

BANK_WEIGHT_FIELDS = (
    "assetWeightInit",
    "assetWeightMaint",
    "liabilityWeightInit",
    "liabilityWeightMaint",
)

INTEREST_RATE_FIELDS = {
    "optimalUtilizationRate": ValueKind.RATE,
    "plateauInterestRate": ValueKind.RATE,
    "maxInterestRate": ValueKind.RATE,
    "insuranceFeeFixedApr": ValueKind.FEE,
    "insuranceIrFee": ValueKind.FEE,
    "protocolFixedFeeApr": ValueKind.FEE,
    "protocolIrFee": ValueKind.FEE,
}

BANK_LIMIT_FIELDS = ("depositLimit", "borrowLimit", "totalAssetValueInitLimit")

BANK_BALANCE_FIELDS = (
    "collectedInsuranceFeesOutstanding",
    "collectedGroupFeesOutstanding",
    "totalAssetShares",
    "totalLiabilityShares",
)

BANK_ENUM_FIELDS = ("operationalState", "oracleSetup", "riskTier")

BANK_VAULT_FIELDS = ("liquidityVault", "feeVault", "insuranceVault")

#: Token decimals assumed when a bank account omits `mintDecimals`.
DEFAULT_TOKEN_DECIMALS = 6


def _get(obj: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(obj, Mapping):
            return None
        obj = obj.get(key)
    return obj


def format_limit(value: Any) -> str:
    """u64 cap display: 'Unlimited' for u64::MAX, the integer otherwise."""
    if isinstance(value, bool):
        raise FormatError(f"format_limit(): expected an integer, got {value!r}")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise FormatError(f"format_limit(): expected an integer, got {value!r}") from None
    if isinstance(value, float) or n < 0 or n > U64_MAX:
        raise FormatError(f"format_limit(): not a u64 limit: {value!r}")
    return "Unlimited" if n == U64_MAX else str(n)


def format_timestamp(unix_seconds: Any) -> str:
    """Unix seconds -> ISO-8601 UTC with a 'Z' suffix."""
    if isinstance(unix_seconds, bool) or not isinstance(unix_seconds, int):
        raise FormatError(f"format_timestamp(): expected int seconds, got {unix_seconds!r}")
    try:
        ts = datetime.fromtimestamp(unix_seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise FormatError(f"format_timestamp(): out of range: {unix_seconds}") from None
    return ts.isoformat().replace("+00:00", "Z")


def format_enum_tag(value: Any) -> str:
    """IDL enum (`{"operational": {}}`) -> its variant name; 'unknown' when absent."""
    if isinstance(value, Mapping):
        return str(next(iter(value), "unknown"))
    if isinstance(value, str) and value:
        return value
    return "unknown"


def format_max_age(seconds: Any) -> str:
    if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
        raise FormatError(f"format_max_age(): expected non-negative int seconds, got {seconds!r}")
    return f"{seconds} seconds"


# ---------------------------------------------------------------------------
# Bank report
# ---------------------------------------------------------------------------

def bank_to_readable(bank: Mapping[str, Any], placeholder: str = DEFAULT_PLACEHOLDER) -> Dict[str, Any]:
    """Render a decoded bank account as display strings.

    Weights use WEIGHT, curve parameters RATE, fees FEE, share values SHARE,
    and fee/share totals DEFAULT. u64 limits equal to u64::MAX show 'Unlimited'.
    """
    def wrapped(value: Any, kind: ValueKind, name: str) -> str:
        return render_or_placeholder(format_wrapped, value, kind, placeholder=placeholder, field=name).text

    config = _get(bank, "config") or {}
    readable_config: Dict[str, Any] = {}
    for name in BANK_WEIGHT_FIELDS:
        readable_config[name] = wrapped(_get(config, name), ValueKind.WEIGHT, name)
    for name in BANK_LIMIT_FIELDS:
        readable_config[name] = render_or_placeholder(
            format_limit, _get(config, name), placeholder=placeholder, field=name
        ).text
    for name in BANK_ENUM_FIELDS:
        readable_config[name] = format_enum_tag(_get(config, name))
    oracle_keys = _get(config, "oracleKeys")
    readable_config["oracleKeys"] = [str(k) for k in oracle_keys] if isinstance(oracle_keys, list) else []
    readable_config["oracleMaxAge"] = render_or_placeholder(
        format_max_age, _get(config, "oracleMaxAge"), placeholder=placeholder, field="oracleMaxAge"
    ).text
    readable_config["interestRateConfig"] = {
        name: wrapped(_get(config, "interestRateConfig", name), kind, name)
        for name, kind in INTEREST_RATE_FIELDS.items()
    }

    out: Dict[str, Any] = {
        "mint": str(_get(bank, "mint") or "Unknown"),
        "mintDecimals": _get(bank, "mintDecimals"),
        "config": readable_config,
        "assetShareValue": wrapped(_get(bank, "assetShareValue"), ValueKind.SHARE, "assetShareValue"),
        "liabilityShareValue": wrapped(_get(bank, "liabilityShareValue"), ValueKind.SHARE, "liabilityShareValue"),
    }
    for name in BANK_BALANCE_FIELDS:
        out[name] = wrapped(_get(bank, name), ValueKind.DEFAULT, name)
    for name in BANK_VAULT_FIELDS:
        vault = _get(bank, name)
        out[name] = str(vault) if vault is not None else placeholder
    return out


# ---------------------------------------------------------------------------
# Lending-account balances
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BalanceSnapshot:
    """One slot of a lending account as decoded from the account JSON."""
    bank_pk: str
    active: bool
    asset_shares: Any
    liability_shares: Any
    emissions_outstanding: Any = None
    last_update: Any = 0

    @classmethod
    def from_account_json(cls, obj: Mapping[str, Any]) -> "BalanceSnapshot":
        return cls(
            bank_pk=str(obj.get("bankPk", "")),
            active=bool(obj.get("active", False)),
            asset_shares=obj.get("assetShares"),
            liability_shares=obj.get("liabilityShares"),
            emissions_outstanding=obj.get("emissionsOutstanding"),
            last_update=obj.get("lastUpdate", 0),
        )


def active_balances(balances: Iterable[BalanceSnapshot]) -> List[BalanceSnapshot]:
    return [b for b in balances if b.active]


def _exact(value: Any) -> str:
    """Exact decimal text of a wrapped field; '0' when the field is absent."""
    if value is None:
        return "0"
    return format(WrappedI80F48.coerce(value).to_decimal(), "f")


def parse_balance(balance: BalanceSnapshot, placeholder: str = DEFAULT_PLACEHOLDER) -> Dict[str, Any]:
    """Exact (undisplayed) view of a balance slot."""
    def exact(value: Any, name: str) -> str:
        return render_or_placeholder(_exact, value, placeholder=placeholder, field=name).text

    return {
        "bankPk": balance.bank_pk,
        "active": balance.active,
        "assetShares": exact(balance.asset_shares, "assetShares"),
        "liabilityShares": exact(balance.liability_shares, "liabilityShares"),
        "emissionsOutstanding": exact(balance.emissions_outstanding, "emissionsOutstanding"),
        "lastUpdate": render_or_placeholder(
            format_timestamp, balance.last_update, placeholder=placeholder, field="lastUpdate"
        ).text,
    }


@dataclass(frozen=True)
class BalanceRow:
    """Display row for one active balance, plus exact amounts for totals."""
    token: str
    balance: str
    debt: str
    last_update: str
    bank_address: str
    token_mint: str
    asset_shares: str
    liability_shares: str
    asset_share_value: str
    liability_share_value: str
    balance_amount: Optional[Decimal] = None
    debt_amount: Optional[Decimal] = None
    errors: Sequence[FormatError] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "balance": self.balance,
            "debt": self.debt,
            "lastUpdate": self.last_update,
            "details": {
                "bankAddress": self.bank_address,
                "tokenMint": self.token_mint,
                "assetShares": self.asset_shares,
                "liabilityShares": self.liability_shares,
                "assetShareValue": self.asset_share_value,
                "liabilityShareValue": self.liability_share_value,
            },
        }


def _decode_field(value: Any, name: str, errors: List[FormatError]) -> Optional[Decimal]:
    try:
        return WrappedI80F48.coerce(value).to_decimal()
    except FormatError as e:
        logger.warning("could not decode %s: %s", name, e)
        errors.append(e)
        return None


def summarize_balance(
    balance: BalanceSnapshot,
    bank: Optional[Mapping[str, Any]],
    symbol: str = "Unknown",
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> BalanceRow:
    """Token balance and debt of one slot, given its bank account JSON (or None)."""
    errors: List[FormatError] = []

    def shown(fn, *args, name: str) -> str:
        r = render_or_placeholder(fn, *args, placeholder=placeholder, field=name)
        if r.error is not None:
            errors.append(r.error)
        return r.text

    asset_shares = _decode_field(balance.asset_shares, "assetShares", errors)
    liability_shares = _decode_field(balance.liability_shares, "liabilityShares", errors)

    asset_value = liability_value = None
    decimals = 0
    mint = "Unknown"
    if bank is None:
        logger.warning("no bank account for balance %s", balance.bank_pk)
    else:
        mint = str(_get(bank, "mint") or "Unknown")
        decimals = _get(bank, "mintDecimals")
        if decimals is None:
            logger.debug("bank %s has no mintDecimals; assuming %d", balance.bank_pk, DEFAULT_TOKEN_DECIMALS)
            decimals = DEFAULT_TOKEN_DECIMALS
        asset_value = _decode_field(_get(bank, "assetShareValue"), "assetShareValue", errors)
        liability_value = _decode_field(_get(bank, "liabilityShareValue"), "liabilityShareValue", errors)

    def amount(shares: Optional[Decimal], value: Optional[Decimal], name: str):
        if shares is None or value is None:
            return placeholder, None
        r = render_or_placeholder(format_token_amount, shares, value, decimals, placeholder=placeholder, field=name)
        if r.error is not None:
            errors.append(r.error)
            return r.text, None
        return r.text, compute_token_amount(shares, value, decimals)

    balance_text, balance_amount = amount(asset_shares, asset_value, "balance")
    debt_text, debt_amount = amount(liability_shares, liability_value, "debt")

    def share_text(value: Optional[Decimal], kind: ValueKind) -> str:
        if value is None:
            return placeholder
        return format_value(value, kind)

    return BalanceRow(
        token=symbol,
        balance=balance_text,
        debt=debt_text,
        last_update=shown(format_timestamp, balance.last_update, name="lastUpdate"),
        bank_address=balance.bank_pk,
        token_mint=mint,
        asset_shares=share_text(asset_shares, ValueKind.BALANCE),
        liability_shares=share_text(liability_shares, ValueKind.BALANCE),
        asset_share_value=share_text(asset_value, ValueKind.SHARE),
        liability_share_value=share_text(liability_value, ValueKind.SHARE),
        balance_amount=balance_amount,
        debt_amount=debt_amount,
        errors=tuple(errors),
    )


@dataclass(frozen=True)
class AccountSummary:
    """USD totals over stable-coin rows (valued 1:1)."""
    total_value: Decimal
    total_debt: Decimal
    net_value: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "totalValueUSD": to_fixed(self.total_value, 2),
            "totalDebtUSD": to_fixed(self.total_debt, 2),
            "netValueUSD": to_fixed(self.net_value, 2),
        }


def summarize_account(rows: Iterable[BalanceRow], stable_symbols: Iterable[str] = ("USDC",)) -> AccountSummary:
    stable = set(stable_symbols)
    total_value = Decimal(0)
    total_debt = Decimal(0)
    with localcontext() as ctx:
        ctx.prec = 2 * EXACT_DIGITS
        for row in rows:
            if row.token not in stable:
                continue
            if row.balance_amount is not None:
                total_value += row.balance_amount
            if row.debt_amount is not None:
                total_debt += row.debt_amount
        net_value = total_value - total_debt
    return AccountSummary(total_value, total_debt, net_value)


def account_report(
    address: str,
    balances: Iterable[Mapping[str, Any]],
    banks: Mapping[str, Mapping[str, Any]],
    config: Optional[ToolingConfig] = None,
    group: str = "",
    authority: str = "",
    account_flags: Any = 0,
) -> Dict[str, Any]:
    """Full report for one lending account.

    `balances` are the raw balance slots, `banks` maps bank address -> bank
    account JSON. `config` is a ToolingConfig (defaults are used when None).
    `group`, `authority` and `account_flags` are copied from the account header.
    """
    if not isinstance(banks, Mapping):
        raise FormatError(f"account_report(): banks must map bank address -> bank account, got {type(banks).__name__}")
    balances = list(balances)
    for b in balances:
        if not isinstance(b, Mapping):
            raise FormatError(f"account_report(): balance slot must be an object, got {type(b).__name__}")
    if config is None:
        config = ToolingConfig()
    placeholder = config.display.placeholder

    rows: List[BalanceRow] = []
    for snapshot in active_balances(BalanceSnapshot.from_account_json(b) for b in balances):
        bank = banks.get(snapshot.bank_pk)
        symbol = config.symbol_for_mint(str(_get(bank, "mint") or "")) if bank is not None else "Unknown"
        rows.append(summarize_balance(snapshot, bank, symbol, placeholder))

    summary = summarize_account(rows, config.display.stable_symbols)
    return {
        "address": address,
        "group": str(group),
        "authority": str(authority),
        "balances": [row.to_dict() for row in rows],
        "summary": summary.to_dict(),
        "accountFlags": str(account_flags),
    }


__all__ = [
    "BANK_WEIGHT_FIELDS",
    "INTEREST_RATE_FIELDS",
    "BANK_LIMIT_FIELDS",
    "BANK_BALANCE_FIELDS",
    "BANK_ENUM_FIELDS",
    "BANK_VAULT_FIELDS",
    "DEFAULT_TOKEN_DECIMALS",
    "format_limit",
    "format_timestamp",
    "format_enum_tag",
    "format_max_age",
    "bank_to_readable",
    "BalanceSnapshot",
    "active_balances",
    "parse_balance",
    "BalanceRow",
    "summarize_balance",
    "AccountSummary",
    "summarize_account",
    "account_report",
]
