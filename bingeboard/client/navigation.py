from __future__ import annotations

from typing import Optional

from bingeboard.client.api import BingeBoardClient

LOGIN_PATH = "/login"
PROTECTED_PATHS = ("/log", "/profile", "/activity", "/friends", "/home")


def is_protected(path: str) -> bool:
    clean = "/" + path.split("?", 1)[0].strip("/")
    return any(clean == p or clean.startswith(p + "/") for p in PROTECTED_PATHS)


def resolve(path: str, authenticated: bool) -> str:
    """Where the visitor ends up: the requested path, or the login page."""
    if is_protected(path) and not authenticated:
        return LOGIN_PATH
    return path


async def guard(api: BingeBoardClient, path: str) -> Optional[str]:
    """
    Check the session before a protected page renders.
    Returns the redirect target, or None when the page may render.
    """
    if not is_protected(path):
        return None
    authenticated = api.authenticated and await api.check_auth()
    target = resolve(path, authenticated)
    return None if target == path else target
