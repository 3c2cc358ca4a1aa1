"""Dispatcher module."""

from .dispatcher import Dispatcher, IDispatcher, RawUpdate
from .locks import IdentityLocks
from .router import CallbackHandler, ErrorHandler, Router, Routes, UpdateHandler

__all__ = [
    "Dispatcher",
    "IDispatcher",
    "RawUpdate",
    "IdentityLocks",
    "Router",
    "Routes",
    "UpdateHandler",
    "CallbackHandler",
    "ErrorHandler",
]
