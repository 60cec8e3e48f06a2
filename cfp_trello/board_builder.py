"""
Deliberation board builder.
Creates one Trello board with its lists, labels and proposal cards.
"""

import logging
from typing import Optional

from .label_cache import LabelCache
from .progress import ProgressLog
from .proposal import ProposalRecord
from .tiering import partition
from .trello_models import Board, Color, Organization, PermissionLevel, TrelloList

logger = logging.getLogger(__name__)

LIST_SELECTION = "Sélection"
LIST_REFUSED = "Refusés"
LIST_OVERFLOW = "T3"

# Lists every board starts with, left to right
SCAFFOLD_LISTS = (LIST_SELECTION, "Désistements", "Backups Acceptés", "Backups")

DESCRIPTION_SEPARATOR = "\n\n---\n\n"


def proposal_labels(proposal: ProposalRecord) -> list[tuple[str, Color]]:
    """Labels shown on a proposal card. Trello sorts a card's labels by color."""
    return [
        (proposal.category, Color.GREEN),
        (f"🏅 {proposal.rating:.1f}", Color.ORANGE),
        (f"{proposal.loves} ❤️ / {proposal.hates} ☠️", Color.RED),
        (proposal.speakers, Color.PURPLE),
        (proposal.audience_level, Color.SKY),
        (proposal.language, Color.PINK),
    ]


class ListPositions:
    """Increasing list positions for one board.

    Trello renders lists by their position field; giving each list the next
    value keeps them in creation order whatever the latency of each call.
    """

    def __init__(self, step: int = 1024):
        self.step = step
        self._count = 0

    def next_position(self) -> int:
        self._count += 1
        return self._count * self.step


class BoardBuilder:
    """Builds deliberation boards, one remote call after the other.

    Any failure stops the board where it is: objects already created stay
    on Trello and the error goes up to the caller.
    """

    def __init__(self, client, label_cache: LabelCache, cfp_url: str, event_id: str,
                 progress: Optional[ProgressLog] = None):
        self.client = client
        self.label_cache = label_cache
        self.cfp_url = cfp_url.rstrip("/")
        self.event_id = event_id
        self.progress = progress

    def _report(self, line: str) -> None:
        logger.info(line)
        if self.progress is not None:
            self.progress.append(line)

    def proposal_url(self, proposal: ProposalRecord) -> str:
        return f"{self.cfp_url}/organizer/event/{self.event_id}/proposals/{proposal.id}"

    def card_description(self, proposal: ProposalRecord) -> str:
        """Link to the proposal, then the abstract, then the speaker's private message."""
        link = f"📜 [Proposal]({self.proposal_url(proposal)})"
        return DESCRIPTION_SEPARATOR.join([link, proposal.abstract, proposal.private_message])

    def build_board(self, proposals: list[ProposalRecord], board_name: str,
                    organization: Organization,
                    visibility: PermissionLevel = PermissionLevel.ORG) -> Board:
        """Create a board holding the given proposals and return it."""
        # Tiers are computed first so invalid proposals fail before any remote call
        tiers = partition(proposals)

        self._report(f"Creating board {board_name} for {len(proposals)} proposals...")
        board = self.client.create_board(board_name, organization, visibility)
        positions = ListPositions()

        self._report("Creating lists for the board...")
        for name in SCAFFOLD_LISTS:
            self._create_list(name, board, positions)

        for category_tiers in tiers.categories:
            self._create_deliberation_list(
                board, positions, f"{category_tiers.category} - T1", category_tiers.first
            )
            if category_tiers.second:
                self._create_deliberation_list(
                    board, positions, f"{category_tiers.category} - T2", category_tiers.second
                )

        # Created even when empty so every board has the same layout
        self._create_deliberation_list(board, positions, LIST_OVERFLOW, tiers.combined_overflow)

        self._create_list(LIST_REFUSED, board, positions)

        self._report(f"Successfully created board {board.name}: {board.url}")
        return board

    def _create_list(self, name: str, board: Board, positions: ListPositions) -> TrelloList:
        return self.client.create_list(name, board, positions.next_position())

    def _create_deliberation_list(self, board: Board, positions: ListPositions, name: str,
                                  proposals: list[ProposalRecord]) -> TrelloList:
        self._report(f'Creating "{name}" deliberation list for {len(proposals)} proposals...')
        trello_list = self._create_list(name, board, positions)
        for proposal in proposals:
            self._create_proposal_card(board, trello_list, proposal)
        return trello_list

    def _create_proposal_card(self, board: Board, trello_list: TrelloList,
                              proposal: ProposalRecord) -> None:
        logger.info(f"Creating card for proposal {proposal.title}...")

        label_ids = [
            self.label_cache.get_or_create(name, board, color)
            for name, color in proposal_labels(proposal)
        ]
        card = self.client.create_card(
            proposal.title,
            self.card_description(proposal),
            trello_list,
            label_ids,
        )

        for message in proposal.organizer_messages:
            self.client.create_comment(message, card)
