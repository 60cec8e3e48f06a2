"""
CFP to Trello - Conference-Hall deliberation boards in Trello.

Splits the proposals of each category into three tiers ranked by rating and
creates one deliberation board per talk format.
"""

__version__ = "1.0.0"

from .config import (
    AppConfig,
    TrelloConfig,
    ConferenceHallConfig,
    GeoConfig,
    ImportConfig,
    load_config,
)
from .errors import (
    CFPTrelloError,
    InvalidInputError,
    AuthError,
    NotFoundError,
    RemoteError,
)
from .proposal import ProposalRecord, Event
from .tiering import CategoryTiers, TieringResult, partition
from .label_cache import LabelCache
from .board_builder import BoardBuilder
from .importer import ImportOrchestrator, ImportResult
from .progress import ProgressLog

__all__ = [
    # Config
    "AppConfig",
    "TrelloConfig",
    "ConferenceHallConfig",
    "GeoConfig",
    "ImportConfig",
    "load_config",
    # Errors
    "CFPTrelloError",
    "InvalidInputError",
    "AuthError",
    "NotFoundError",
    "RemoteError",
    # Deliberation
    "ProposalRecord",
    "Event",
    "CategoryTiers",
    "TieringResult",
    "partition",
    "LabelCache",
    "BoardBuilder",
    "ImportOrchestrator",
    "ImportResult",
    "ProgressLog",
]
