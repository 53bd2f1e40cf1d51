"""Authenticated request context."""
from dataclasses import dataclass

from taskapp.models import User


@dataclass
class AuthContext:
    """The user resolved from a bearer token, plus the raw token itself.

    Built once by the auth dependency and passed explicitly to handlers. The
    raw token is kept so logout can revoke exactly the session in use.
    """

    user: User
    token: str
