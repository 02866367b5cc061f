"""
Key provider implementations for resolving token signing keys.

This package contains implementations of the KeyProvider protocol.
"""

from .jwks import KeyResolver

__all__ = ["KeyResolver"]
