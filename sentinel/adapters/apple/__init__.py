"""
Apple Maps credential adapters for Sentinel.
"""

from .token import AppleMapsTokenProvider

__all__ = ["AppleMapsTokenProvider"]
