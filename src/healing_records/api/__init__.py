"""
API module for the healing record service.

This module contains:
- healing_endpoints.py: REST endpoints for selectors, healings and feedback
"""

__all__ = ["healing_endpoints"]
