"""
Core module for the healing record service.

This module contains:
- config.py: Application settings
- config_loader.py: Record-keeping policy loaded from YAML
- exceptions.py: Error taxonomy
- healing_utils.py: Key derivation and header helpers
- logging_config.py: Logging configuration
"""

__all__ = ["config", "config_loader", "exceptions", "healing_utils", "logging_config"]
