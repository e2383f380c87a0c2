"""
Error taxonomy for the polling and announcement pipeline.

None of these is fatal: fetch errors are local to one poll tick, asset
errors are local to one announcement surface.
"""


class DeskError(Exception):
    """Base exception for EventDesk."""


class NetworkError(DeskError):
    """Transport failure, timeout, or non-2xx response from the backend."""


class ParseError(DeskError):
    """Backend answered but the payload is malformed or incomplete."""


class AuthError(NetworkError):
    """Session token rejected (401/403). Forces re-authentication."""


class AssetError(DeskError):
    """Animation or sound resource missing/unreadable on an announcement surface."""


class StoreError(DeskError):
    """Local state database could not be read or written."""
