"""
Memory module for login session storage.
"""
from .store import SessionStore

__all__ = ["SessionStore"]
