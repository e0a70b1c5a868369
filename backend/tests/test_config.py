import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import config as config_module  # noqa: E402


def _settings(**overrides):
    return config_module.Settings(_env_file=None, **overrides)


def test_defaults_match_service_contract():
    settings = _settings()

    assert settings.DEX_CHAIN_ID == "solana"
    assert settings.DEX_TARGET_UNIVERSE == 100
    assert settings.persistence_slots == 15
    assert settings.DEX_CANDIDATE_POOL_SIZE == 250
    assert settings.DEX_REQUEST_TIMEOUT_MS == 8_000
    assert settings.PORT == 3001
    assert settings.search_terms == ["pump", "moon", "meme", "ai", "cat", "dog", "sol"]


def test_persistence_slots_are_derived_and_clamped():
    assert _settings(DEX_TARGET_UNIVERSE=50).persistence_slots == 0
    assert _settings(DEX_TARGET_UNIVERSE=120).persistence_slots == 35
    assert _settings(DEX_PERSISTENCE_SLOTS=500).persistence_slots == 100
    assert _settings(DEX_PERSISTENCE_SLOTS=-3).persistence_slots == 0


def test_invalid_numbers_are_clamped_not_rejected():
    settings = _settings(
        DEX_TRENDING_SLOTS=-5,
        DEX_MIN_LIQUIDITY_USD=-1,
        DEX_WEAK_CYCLES_BEFORE_DROP=0,
        DEX_MAX_ADDRESSES_PER_REQUEST=0,
        DEX_FAST_REFRESH_MS=10,
    )

    assert settings.DEX_TRENDING_SLOTS == 0
    assert settings.DEX_MIN_LIQUIDITY_USD == 0
    assert settings.DEX_WEAK_CYCLES_BEFORE_DROP == 1
    assert settings.DEX_MAX_ADDRESSES_PER_REQUEST == 1
    assert settings.DEX_FAST_REFRESH_MS == 1_000


def test_strings_are_normalised():
    settings = _settings(
        DEX_API_BASE_URL=' "https://api.dexscreener.com/" ',
        DEX_CHAIN_ID=" Solana ",
        DEX_SEARCH_TERMS=" pump , ,dog ",
    )

    assert settings.DEX_API_BASE_URL == "https://api.dexscreener.com"
    assert settings.DEX_CHAIN_ID == "solana"
    assert settings.search_terms == ["pump", "dog"]


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("DEX_TARGET_UNIVERSE", "40")
    monkeypatch.setenv("DEX_TRENDING_SLOTS", "20")
    monkeypatch.setenv("DEX_FRESH_SLOTS", "10")
    monkeypatch.setenv("DEX_CHAIN_ID", "BASE")

    settings = _settings()

    assert settings.DEX_TARGET_UNIVERSE == 40
    assert settings.persistence_slots == 10
    assert settings.DEX_CHAIN_ID == "base"


def test_snapshot_config_uses_camel_case_keys():
    config = _settings(DEX_TARGET_UNIVERSE=80).snapshot_config()

    assert config == {
        "chainId": "solana",
        "targetUniverse": 80,
        "trendingSlots": 60,
        "freshSlots": 25,
        "persistenceSlots": 0,
        "fastRefreshMs": 15_000,
        "candidateRefreshMs": 60_000,
        "rebalanceMs": 300_000,
        "minLiquidityUsd": 25_000,
        "minVolumeH24Usd": 100_000,
        "weakCyclesBeforeDrop": 2,
        "candidatePoolSize": 250,
        "maxFreshAgeHours": 24,
    }
