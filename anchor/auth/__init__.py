# anchor/auth/__init__.py
"""
Admin authentication for Anchor.
"""

from .middleware import ADMIN_HEADER, AuthResult, require_admin

__all__ = [
    "ADMIN_HEADER",
    "AuthResult",
    "require_admin",
]
