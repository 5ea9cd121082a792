"""Asset classification tables shared by pricing and yield analysis."""

STABLECOINS = frozenset(
    {"USDC", "USDT", "DAI", "DAI.E", "FRAX", "LUSD", "BUSD", "USDS", "USDE", "USDC.E", "USDBC"}
)

# Symbols considered interchangeable when comparing yield opportunities.
EQUIVALENCE_CLASSES: dict[str, frozenset[str]] = {
    "stable": STABLECOINS,
    "eth": frozenset({"ETH", "WETH", "WETH.E", "STETH", "WSTETH", "RETH", "CBETH"}),
    "sol": frozenset({"SOL", "WSOL", "MSOL", "JITOSOL"}),
    "pol": frozenset({"POL", "WPOL", "MATIC", "WMATIC"}),
    "avax": frozenset({"AVAX", "WAVAX"}),
    "bnb": frozenset({"BNB", "WBNB"}),
}


def is_stablecoin(symbol: str) -> bool:
    return symbol.upper() in STABLECOINS


def equivalence_class(symbol: str) -> str | None:
    upper = symbol.upper()
    for name, members in EQUIVALENCE_CLASSES.items():
        if upper in members:
            return name
    return None


def is_equivalent_asset(a: str, b: str) -> bool:
    """Same symbol, or both members of the same equivalence class."""
    if a.upper() == b.upper():
        return True
    cls = equivalence_class(a)
    return cls is not None and cls == equivalence_class(b)
