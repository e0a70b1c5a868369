from pathlib import Path
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

# Get the directory where this config file is located.
_BACKEND_DIR = Path(__file__).parent.resolve()
_PROJECT_ROOT = _BACKEND_DIR.parent.resolve()

_MIN_CADENCE_MS = 1_000


class Settings(BaseSettings):
    # Service
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ORIGINS: list[str] = ["*"]

    # DEX Screener
    DEX_API_BASE_URL: str = "https://api.dexscreener.com"
    DEX_CHAIN_ID: str = "solana"
    DEX_REQUEST_TIMEOUT_MS: int = 8_000
    DEX_MAX_ADDRESSES_PER_REQUEST: int = 30  # Provider cap on /tokens/v1 lookups
    DEX_HYDRATION_CHUNK_SIZE: int = 120  # Discovery addresses hydrated per parallel round
    DEX_SEARCH_TERMS: str = "pump,moon,meme,ai,cat,dog,sol"

    # Universe shape
    DEX_TARGET_UNIVERSE: int = 100
    DEX_TRENDING_SLOTS: int = 60
    DEX_FRESH_SLOTS: int = 25
    # Unset = whatever target leaves after trending + fresh; always clamped
    # to [0, target] below.
    DEX_PERSISTENCE_SLOTS: Optional[int] = None
    DEX_CANDIDATE_POOL_SIZE: int = 250

    # Entry thresholds (keep filter uses 0.6x liquidity / 0.4x 24h volume)
    DEX_MIN_LIQUIDITY_USD: float = 25_000.0
    DEX_MIN_VOLUME_M5_USD: float = 5_000.0
    DEX_MIN_VOLUME_H1_USD: float = 25_000.0
    DEX_MIN_VOLUME_H24_USD: float = 100_000.0
    DEX_MIN_AGE_MINUTES: float = 5.0
    DEX_MAX_FRESH_AGE_HOURS: float = 24.0

    # Eviction
    DEX_WEAK_CYCLES_BEFORE_DROP: int = 2

    # Cadences
    DEX_FAST_REFRESH_MS: int = 15_000
    DEX_CANDIDATE_REFRESH_MS: int = 60_000
    DEX_REBALANCE_MS: int = 300_000

    @field_validator("DEX_API_BASE_URL", mode="before")
    @classmethod
    def _normalize_url_field(cls, value: object) -> object:
        """Trim accidental quotes/whitespace and the trailing slash."""
        if value is None:
            return value
        return str(value).strip().strip('"').strip("'").rstrip("/")

    @field_validator("DEX_CHAIN_ID", mode="before")
    @classmethod
    def _normalize_chain_id(cls, value: object) -> object:
        if value is None:
            return value
        return str(value).strip().lower() or "solana"

    @field_validator(
        "DEX_TARGET_UNIVERSE",
        "DEX_TRENDING_SLOTS",
        "DEX_FRESH_SLOTS",
        "DEX_CANDIDATE_POOL_SIZE",
        "DEX_MIN_LIQUIDITY_USD",
        "DEX_MIN_VOLUME_M5_USD",
        "DEX_MIN_VOLUME_H1_USD",
        "DEX_MIN_VOLUME_H24_USD",
        "DEX_MIN_AGE_MINUTES",
        "DEX_MAX_FRESH_AGE_HOURS",
        mode="after",
    )
    @classmethod
    def _clamp_non_negative(cls, value):
        return max(0, value)

    @field_validator("DEX_WEAK_CYCLES_BEFORE_DROP", "DEX_MAX_ADDRESSES_PER_REQUEST", "DEX_HYDRATION_CHUNK_SIZE")
    @classmethod
    def _clamp_at_least_one(cls, value: int) -> int:
        return max(1, value)

    @field_validator("DEX_FAST_REFRESH_MS", "DEX_CANDIDATE_REFRESH_MS", "DEX_REBALANCE_MS")
    @classmethod
    def _clamp_cadence(cls, value: int) -> int:
        return max(_MIN_CADENCE_MS, value)

    @model_validator(mode="after")
    def _derive_persistence_slots(self) -> "Settings":
        configured = self.DEX_PERSISTENCE_SLOTS
        if configured is None:
            configured = self.DEX_TARGET_UNIVERSE - self.DEX_TRENDING_SLOTS - self.DEX_FRESH_SLOTS
        self.DEX_PERSISTENCE_SLOTS = max(0, min(self.DEX_TARGET_UNIVERSE, configured))
        return self

    @property
    def search_terms(self) -> list[str]:
        return [term.strip() for term in self.DEX_SEARCH_TERMS.split(",") if term.strip()]

    @property
    def persistence_slots(self) -> int:
        return int(self.DEX_PERSISTENCE_SLOTS or 0)

    def snapshot_config(self) -> dict:
        """Thresholds and cadences echoed back to consumers in every snapshot."""
        return {
            "chainId": self.DEX_CHAIN_ID,
            "targetUniverse": self.DEX_TARGET_UNIVERSE,
            "trendingSlots": self.DEX_TRENDING_SLOTS,
            "freshSlots": self.DEX_FRESH_SLOTS,
            "persistenceSlots": self.persistence_slots,
            "fastRefreshMs": self.DEX_FAST_REFRESH_MS,
            "candidateRefreshMs": self.DEX_CANDIDATE_REFRESH_MS,
            "rebalanceMs": self.DEX_REBALANCE_MS,
            "minLiquidityUsd": self.DEX_MIN_LIQUIDITY_USD,
            "minVolumeH24Usd": self.DEX_MIN_VOLUME_H24_USD,
            "weakCyclesBeforeDrop": self.DEX_WEAK_CYCLES_BEFORE_DROP,
            "candidatePoolSize": self.DEX_CANDIDATE_POOL_SIZE,
            "maxFreshAgeHours": self.DEX_MAX_FRESH_AGE_HOURS,
        }

    class Config:
        # Load project-root .env first (common workflow), then backend/.env
        # as an override if present.
        env_file = (
            str(_PROJECT_ROOT / ".env"),
            str(_BACKEND_DIR / ".env"),
        )
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
