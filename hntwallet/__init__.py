"""Helium wallet keys, password hashing, key formats, transactions, fees, signing and staking client."""

__version__ = "0.1.0"