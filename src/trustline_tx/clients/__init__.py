"""
Client module for the relay server.

Provides the httpx-based provider every preparation step reads from.
"""

from .relay_provider import RelayProvider

__all__ = ["RelayProvider"]
