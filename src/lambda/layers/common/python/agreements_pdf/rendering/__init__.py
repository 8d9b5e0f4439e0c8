"""Headless rendering of agreement pages."""

from .auth import AUTH_HEADER, mint_auth_token
from .browser import BrowserSession, launch_browser
from .renderer import AgreementRenderer

__all__ = [
    "AUTH_HEADER",
    "AgreementRenderer",
    "BrowserSession",
    "launch_browser",
    "mint_auth_token",
]
