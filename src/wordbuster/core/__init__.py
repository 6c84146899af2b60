"""Core module - Configuration, models, and the enumeration engine."""

from wordbuster.core.config import RunConfig, Settings
from wordbuster.core.engine import EnumerationEngine, RunContext, WorkerPool
from wordbuster.core.models import BaselineSignature, Candidate, Failure, FilterPolicy, RunSummary, Success

__all__ = [
    "Settings",
    "RunConfig",
    "EnumerationEngine",
    "RunContext",
    "WorkerPool",
    "Candidate",
    "Success",
    "Failure",
    "BaselineSignature",
    "FilterPolicy",
    "RunSummary",
]
