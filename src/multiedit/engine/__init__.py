"""Match discovery, region bookkeeping and edit synchronisation."""

from .errors import (
    CommandParseError,
    InvalidScopeError,
    MultieditError,
    NoHistoryError,
    NoMatchableError,
    NoMoreMatchesError,
    NoMoreOccurrencesError,
    RegionCreationError,
    SessionStateError,
)
from .history import HistoryStore
from .models import (
    Boundary,
    Direction,
    HistorySnapshot,
    Pattern,
    Region,
    Scope,
    SessionState,
)
from .occurrences import MAX_REJECTED_CANDIDATES, OccurrenceIndex
from .pattern import PatternDeriver
from .scope import ScopeResolver
from .sync import SyncEditController

__all__ = [
    "Boundary",
    "Direction",
    "HistorySnapshot",
    "Pattern",
    "Region",
    "Scope",
    "SessionState",
    "HistoryStore",
    "OccurrenceIndex",
    "MAX_REJECTED_CANDIDATES",
    "PatternDeriver",
    "ScopeResolver",
    "SyncEditController",
    "MultieditError",
    "NoMatchableError",
    "InvalidScopeError",
    "NoMoreMatchesError",
    "NoMoreOccurrencesError",
    "RegionCreationError",
    "SessionStateError",
    "NoHistoryError",
    "CommandParseError",
]
