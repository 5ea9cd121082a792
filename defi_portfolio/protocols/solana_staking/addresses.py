"""Solana liquid staking mints and estimated yields."""

MSOL_MINT = "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"
JITOSOL_MINT = "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn"

MARINADE_ESTIMATED_APY = 0.068
JITO_ESTIMATED_APY = 0.072
