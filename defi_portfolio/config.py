"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ChainId = Union[int, str]

SOLANA_CHAIN_ID = "solana"
CHAIN_FAMILIES = ("evm", "solana")
MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    chain_id: ChainId = 1
    name: str = ""
    family: str = "evm"
    native_symbol: str = "ETH"
    native_decimals: int = 18
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    multicall3: str = MULTICALL3_ADDRESS

    @property
    def primary_rpc(self) -> str:
        return self.rpc_endpoints[0]


@dataclass(frozen=True)
class RateLimitConfig:
    capacity: float = 10.0
    refill_per_second: float = 0.5


@dataclass(frozen=True)
class CoinGeckoConfig:
    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: str = ""
    timeout: int = 10
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DerivativeConfig:
    base: str = "ETH"
    premium: float = 1.0


def _default_pegs() -> dict[str, float]:
    return {"EURC": 1.08, "EURS": 1.08}


def _default_premiums() -> dict[str, DerivativeConfig]:
    return {
        "WSTETH": DerivativeConfig("ETH", 1.15),
        "STETH": DerivativeConfig("ETH", 1.0),
        "RETH": DerivativeConfig("ETH", 1.0),
        "CBETH": DerivativeConfig("ETH", 1.0),
        "WETH": DerivativeConfig("ETH", 1.0),
        "WETH.E": DerivativeConfig("ETH", 1.0),
        "WPOL": DerivativeConfig("POL", 1.0),
        "WAVAX": DerivativeConfig("AVAX", 1.0),
        "WBNB": DerivativeConfig("BNB", 1.0),
    }


@dataclass(frozen=True)
class PricingConfig:
    cache_ttl_seconds: float = 300.0
    stablecoin_pegs: dict[str, float] = field(default_factory=_default_pegs)
    derivative_premiums: dict[str, DerivativeConfig] = field(
        default_factory=_default_premiums
    )
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class PortfolioConfig:
    request_timeout_seconds: float = 60.0
    result_cache_ttl_seconds: float = 120.0


def _default_risk_tiers() -> dict[str, tuple[str, ...]]:
    return {
        "low": ("aave-v3", "compound-v3", "lido"),
        "medium": ("spark", "uniswap-v3", "rocket-pool", "marinade", "jito"),
    }


@dataclass(frozen=True)
class YieldAnalysisConfig:
    min_value_usd: float = 10.0
    min_apy_improvement: float = 0.005
    max_idle_suggestions: int = 3
    risk_tiers: dict[str, tuple[str, ...]] = field(default_factory=_default_risk_tiers)


@dataclass(frozen=True)
class AppConfig:
    chains: dict[ChainId, ChainConfig] = field(default_factory=dict)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)
    yield_analysis: YieldAnalysisConfig = field(default_factory=YieldAnalysisConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _parse_chain_id(raw: Any) -> ChainId:
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    return int(text) if text.isdigit() else text.lower()


def _build_chains(raw: dict[str, Any]) -> dict[ChainId, ChainConfig]:
    chains: dict[ChainId, ChainConfig] = {}
    for key, cfg in raw.items():
        chain_id = _parse_chain_id(cfg.get("chain_id", key))
        if chain_id in chains:
            raise ValueError(f"Duplicate chain id '{chain_id}' in chain '{key}'")
        chains[chain_id] = ChainConfig(
            chain_id=chain_id,
            name=cfg.get("name", str(key)),
            family=cfg.get("family", "evm"),
            native_symbol=cfg.get("native_symbol", "ETH"),
            native_decimals=int(cfg.get("native_decimals", 18)),
            rpc_endpoints=tuple(
                url.strip() for url in cfg.get("rpc_endpoints", []) if url and url.strip()
            ),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
            multicall3=cfg.get("multicall3", MULTICALL3_ADDRESS),
        )
    return chains


def _build_pricing(raw: dict[str, Any]) -> PricingConfig:
    cg_raw = raw.get("coingecko", {})
    rl_raw = cg_raw.get("rate_limit", {})
    pyth_raw = raw.get("pyth", {})

    premiums = _default_premiums()
    for symbol, entry in raw.get("derivative_premiums", {}).items():
        premiums[symbol.upper()] = DerivativeConfig(
            base=str(entry.get("base", "ETH")).upper(),
            premium=float(entry.get("premium", 1.0)),
        )

    pegs = _default_pegs()
    pegs.update(
        {symbol.upper(): float(peg) for symbol, peg in raw.get("stablecoin_pegs", {}).items()}
    )

    return PricingConfig(
        cache_ttl_seconds=float(raw.get("cache_ttl_seconds", 300)),
        stablecoin_pegs=pegs,
        derivative_premiums=premiums,
        coingecko=CoinGeckoConfig(
            base_url=cg_raw.get("base_url", CoinGeckoConfig.base_url),
            api_key=cg_raw.get("api_key", "") or "",
            timeout=int(cg_raw.get("timeout", 10)),
            rate_limit=RateLimitConfig(
                capacity=float(rl_raw.get("capacity", 10)),
                refill_per_second=float(rl_raw.get("refill_per_second", 0.5)),
            ),
        ),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds={k.upper(): v for k, v in pyth_raw.get("feeds", {}).items()},
        ),
    )


def _build_portfolio(raw: dict[str, Any]) -> PortfolioConfig:
    return PortfolioConfig(
        request_timeout_seconds=float(raw.get("request_timeout_seconds", 60)),
        result_cache_ttl_seconds=float(raw.get("result_cache_ttl_seconds", 120)),
    )


def _build_yield_analysis(raw: dict[str, Any]) -> YieldAnalysisConfig:
    tiers_raw = raw.get("risk_tiers")
    risk_tiers = (
        {tier: tuple(p.lower() for p in ids) for tier, ids in tiers_raw.items()}
        if tiers_raw
        else _default_risk_tiers()
    )
    return YieldAnalysisConfig(
        min_value_usd=float(raw.get("min_value_usd", 10)),
        min_apy_improvement=float(raw.get("min_apy_improvement", 0.005)),
        max_idle_suggestions=int(raw.get("max_idle_suggestions", 3)),
        risk_tiers=risk_tiers,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chains=_build_chains(raw.get("chains", {})),
        pricing=_build_pricing(raw.get("pricing", {})),
        portfolio=_build_portfolio(raw.get("portfolio", {})),
        yield_analysis=_build_yield_analysis(raw.get("yield_analysis", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s (%d chains)", config_path, len(cfg.chains))
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.chains:
        raise ValueError("At least one chain must be configured")

    for chain_id, chain in cfg.chains.items():
        if chain.family not in CHAIN_FAMILIES:
            raise ValueError(
                f"Chain '{chain.name}' has unknown family '{chain.family}'"
            )
        if not chain.rpc_endpoints:
            raise ValueError(f"Chain '{chain.name}' ({chain_id}) has no RPC endpoints")
        if chain.family == "evm" and not isinstance(chain_id, int):
            raise ValueError(f"EVM chain '{chain.name}' needs a numeric chain_id")

    if cfg.pricing.cache_ttl_seconds <= 0:
        raise ValueError("pricing.cache_ttl_seconds must be positive")
    rate_limit = cfg.pricing.coingecko.rate_limit
    if rate_limit.capacity < 1 or rate_limit.refill_per_second <= 0:
        raise ValueError("pricing.coingecko.rate_limit must allow at least one request")
    if cfg.portfolio.request_timeout_seconds <= 0:
        raise ValueError("portfolio.request_timeout_seconds must be positive")
