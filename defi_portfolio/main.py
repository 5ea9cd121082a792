#!/usr/bin/env python3
"""
DeFi Portfolio Tracker
Entry point for ``python -m defi_portfolio.main``
"""
from .cli import main

if __name__ == "__main__":
    main()
