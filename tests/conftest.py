from __future__ import annotations
from decimal import Decimal
from typing import Any, Callable, Dict

import pytest

from lendkit.core import U64_MAX, encode


SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


# -----------------------------
# Test helpers (pure functions)
# -----------------------------

def wrap_json(x: Any) -> Dict[str, Any]:
    """IDL JSON shape of an encoded I80F48 field."""
    return {"value": list(encode(x))}


def make_bank(mint: str, decimals: int, asset_share_value: str = "1", liability_share_value: str = "1") -> Dict[str, Any]:
    return {
        "mint": mint,
        "mintDecimals": decimals,
        "config": {
            "assetWeightInit": wrap_json("0.8"),
            "assetWeightMaint": wrap_json("0.9"),
            "liabilityWeightInit": wrap_json("1.1"),
            "liabilityWeightMaint": wrap_json("1"),
            "depositLimit": U64_MAX,
            "borrowLimit": 1000,
            "totalAssetValueInitLimit": 0,
            "operationalState": {"operational": {}},
            "oracleSetup": {"pythPushOracle": {}},
            "riskTier": {"collateral": {}},
            "oracleKeys": ["OracleKey111", "OracleKey222"],
            "oracleMaxAge": 60,
            "interestRateConfig": {
                "optimalUtilizationRate": wrap_json("0.8"),
                "plateauInterestRate": wrap_json("0.1"),
                "maxInterestRate": wrap_json("2"),
                "insuranceFeeFixedApr": wrap_json("0"),
                "insuranceIrFee": wrap_json("0"),
                "protocolFixedFeeApr": wrap_json("0.01"),
                "protocolIrFee": wrap_json("0.05"),
            },
        },
        "assetShareValue": wrap_json(asset_share_value),
        "liabilityShareValue": wrap_json(liability_share_value),
        "collectedInsuranceFeesOutstanding": wrap_json("0.005"),
        "collectedGroupFeesOutstanding": wrap_json("0"),
        "totalAssetShares": wrap_json("2500"),
        "totalLiabilityShares": wrap_json("1200.5"),
        "liquidityVault": "LiqVault111",
        "feeVault": "FeeVault111",
        "insuranceVault": "InsVault111",
    }


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def wrap() -> Callable[[Any], Dict[str, Any]]:
    return wrap_json


@pytest.fixture()
def usdc_bank() -> Dict[str, Any]:
    return make_bank(USDC_MINT, 6, asset_share_value="1.5", liability_share_value="1.25")


@pytest.fixture()
def sol_bank() -> Dict[str, Any]:
    return make_bank(SOL_MINT, 9)


@pytest.fixture()
def usdc_balance_json() -> Dict[str, Any]:
    return {
        "bankPk": "BankUSDC111",
        "active": True,
        "assetShares": wrap_json("100"),
        "liabilityShares": wrap_json("40"),
        "emissionsOutstanding": wrap_json("0"),
        "lastUpdate": 0,
    }


@pytest.fixture()
def empty_env() -> Dict[str, str]:
    return {}
