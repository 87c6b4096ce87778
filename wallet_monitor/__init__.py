"""Wallet balance monitor: reconciles e-wallet balances and streams changes."""

__version__ = "1.0.0"
