"""Hypercert allowlist core — allocation, commitment and mint encoding."""

__version__ = "0.3.0"
