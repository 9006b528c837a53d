"""Fixture-driven compatibility checks for Solana JSON-RPC endpoints."""

__version__ = "0.1.0"