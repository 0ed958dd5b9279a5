"""Utility functions."""

from tembea.utils.audit import get_client_ip, log_action
from tembea.utils.dates import as_utc, utcnow
from tembea.utils.password import hash_password, verify_password

__all__ = [
    "as_utc",
    "get_client_ip",
    "hash_password",
    "log_action",
    "utcnow",
    "verify_password",
]
