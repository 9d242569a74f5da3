"""Configuration for the mint pipeline."""

from hypercert.policy.resolver import ParamsResolver

__all__ = ["ParamsResolver"]
