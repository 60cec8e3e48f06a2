"""
Import orchestration for CFP to Trello.
Authenticates, resolves the organization and builds one deliberation board per format.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .auth import TrelloAuthorizer, TrelloCredentials
from .board_builder import BoardBuilder
from .errors import CFPTrelloError, InvalidInputError
from .label_cache import LabelCache
from .progress import ProgressLog
from .proposal import Event, ProposalRecord
from .tiering import group_by_category
from .trello_models import Board, PermissionLevel

logger = logging.getLogger(__name__)


@dataclass
class BoardPlan:
    """A board to create: its name and the proposals it holds."""
    name: str
    format: str
    proposals: list[ProposalRecord]


@dataclass
class ImportResult:
    """Outcome of a successful import."""
    boards: list[Board] = field(default_factory=list)
    elapsed_ms: float = 0.0
    proposal_count: int = 0


def board_name(prefix: str, event_name: str, format_name: str) -> str:
    return f"{prefix} {event_name} - {format_name}"


def plan_boards(event: Event, prefix: str, formats: Optional[list[str]] = None) -> list[BoardPlan]:
    """One board per format that has proposals, in format order.

    Every proposal is checked for a category here, so invalid input is
    reported before anything is created on Trello.
    """
    plans = []
    for format_name in event.formats:
        if formats and format_name not in formats:
            logger.debug(f"Skipping format {format_name} (not in configured formats)")
            continue
        proposals = event.get_proposals(format_name)
        if not proposals:
            logger.info(f"No proposals for format {format_name}, no board created")
            continue
        group_by_category(proposals)
        plans.append(BoardPlan(board_name(prefix, event.name, format_name), format_name, proposals))
    return plans


class ImportOrchestrator:
    """Runs an import: one board after the other, sharing one label cache."""

    def __init__(
        self,
        authorizer: TrelloAuthorizer,
        client_factory: Callable[[TrelloCredentials], object],
        progress: ProgressLog,
        cfp_url: str,
        event_id: str,
        board_name_prefix: str = "Délibération",
        visibility: PermissionLevel = PermissionLevel.ORG,
        formats: Optional[list[str]] = None,
    ):
        self.authorizer = authorizer
        self.client_factory = client_factory
        self.progress = progress
        self.cfp_url = cfp_url
        self.event_id = event_id
        self.board_name_prefix = board_name_prefix
        self.visibility = visibility
        self.formats = formats or []

        # Boards of the current run, filled as they are completed
        self.created_boards: list[Board] = []

    def run(self, organization_name: str, event: Event) -> ImportResult:
        """Import the event's proposals into the organization.

        Raises InvalidInputError, AuthError, NotFoundError or RemoteError; the
        first error stops the run and nothing already created is deleted.
        """
        self.progress.clear()
        self.created_boards.clear()

        if not organization_name or not organization_name.strip():
            self.progress.append("The name of the Trello organization is required")
            raise InvalidInputError("The name of the Trello organization is required")

        start = time.monotonic()
        try:
            return self._import(organization_name.strip(), event, start)
        except InvalidInputError as e:
            logger.error(f"Invalid CFP data: {e}")
            self.progress.append(f"Invalid CFP data: {e}")
            raise
        except CFPTrelloError:
            logger.exception(f"Error while importing event {event.name} in Trello")
            self.progress.append("An error occurred, please check the logs for more details")
            raise

    def _import(self, organization_name: str, event: Event, start: float) -> ImportResult:
        plans = plan_boards(event, self.board_name_prefix, self.formats)
        proposal_count = sum(len(plan.proposals) for plan in plans)
        self.progress.append(f"There are {proposal_count} proposals to import...")

        credentials = self.authorizer.authorize()
        client = self.client_factory(credentials)
        member = client.get_current_user()
        self.progress.append(f"Successfully authenticated into Trello with user {member.full_name}")

        organization = client.get_organization(organization_name)
        self.progress.append(
            f"Deliberation boards will be created for the organization "
            f"{organization.display_name or organization.name}..."
        )

        label_cache = LabelCache(client)
        builder = BoardBuilder(client, label_cache, self.cfp_url, self.event_id, self.progress)
        for plan in plans:
            board = builder.build_board(plan.proposals, plan.name, organization, self.visibility)
            self.created_boards.append(board)

        elapsed_ms = (time.monotonic() - start) * 1000
        self.progress.append(
            f"{proposal_count} proposals successfully imported in Trello in {elapsed_ms:.0f} ms 😎🚀🍾"
        )
        logger.info(
            f"Successfully imported event {event.name} in Trello "
            f"({len(self.created_boards)} boards, {elapsed_ms:.0f} ms)"
        )
        return ImportResult(
            boards=list(self.created_boards),
            elapsed_ms=elapsed_ms,
            proposal_count=proposal_count,
        )
