"""Healing record service: stores, ranks and tracks self-healing locator candidates."""

__version__ = "0.1.0"
