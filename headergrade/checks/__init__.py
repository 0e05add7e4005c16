"""Header rule groups, configuration validators and cross-cutting analyzers."""

from .essential import ESSENTIAL_RULES
from .advanced import ADVANCED_RULES
from .cors import CORS_RULES
from .cookies import SET_COOKIE_RULE, analyze_cookies
from .disclosure import DISCLOSURE_RULES, analyze_disclosure

__all__ = [
    "ESSENTIAL_RULES",
    "ADVANCED_RULES",
    "CORS_RULES",
    "SET_COOKIE_RULE",
    "DISCLOSURE_RULES",
    "analyze_cookies",
    "analyze_disclosure",
]
