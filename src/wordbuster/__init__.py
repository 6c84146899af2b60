"""wordbuster - Wordlist-driven content, host and service enumeration."""

__version__ = "1.0.0"

from wordbuster.core.config import Settings
from wordbuster.core.models import Candidate, RunSummary

__all__ = [
    "Settings",
    "Candidate",
    "RunSummary",
]
