"""Shared fixtures: an in-memory Trello and proposal factories."""
import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from cfp_trello.errors import NotFoundError, RemoteError
from cfp_trello.proposal import ProposalRecord
from cfp_trello.trello_models import (
    Board,
    Card,
    Label,
    Member,
    Organization,
    TrelloList,
)


class FakeTrelloClient:
    """In-memory Trello recording every call in order.

    `fail_on_label` makes the n-th label creation (1-based) fail.
    """

    def __init__(self, fail_on_label=None, known_organizations=("bdxio",)):
        self.fail_on_label = fail_on_label
        self.known_organizations = set(known_organizations)
        self.calls = []
        self.boards = {}       # board id -> Board
        self.lists = {}        # board id -> [TrelloList]
        self.cards = {}        # list id -> [Card]
        self.labels = {}       # label id -> Label
        self.comments = {}     # card id -> [str]
        self.label_calls = 0
        self._next_id = 0

    def _id(self, prefix):
        self._next_id += 1
        return f"{prefix}{self._next_id}"

    def get_current_user(self):
        self.calls.append(("me",))
        return Member(id="m1", username="orga", full_name="Orga Nizer")

    def get_organization(self, name):
        self.calls.append(("organization", name))
        if name not in self.known_organizations:
            raise NotFoundError(f"Trello organization not found: {name}")
        return Organization(id=f"org-{name}", name=name, display_name=name.upper())

    def create_board(self, name, organization, visibility):
        self.calls.append(("board", name))
        board = Board(id=self._id("b"), name=name, url=f"http://trello.localhost/{name}")
        self.boards[board.id] = board
        self.lists[board.id] = []
        return board

    def create_list(self, name, board, position):
        if board.id not in self.boards:
            raise RemoteError(f"board {board.id} doesn't exist", 404)
        self.calls.append(("list", name, position))
        trello_list = TrelloList(id=self._id("l"), name=name, pos=position)
        self.lists[board.id].append(trello_list)
        self.cards[trello_list.id] = []
        return trello_list

    def create_label(self, name, board, color):
        self.label_calls += 1
        if self.fail_on_label is not None and self.label_calls == self.fail_on_label:
            raise RemoteError("label creation failed", 500, '{"message": "boom"}')
        self.calls.append(("label", name, board.id, color))
        label = Label(id=self._id("lab"), name=name, color=color)
        self.labels[label.id] = label
        return label

    def create_card(self, name, description, trello_list, label_ids):
        if trello_list.id not in self.cards:
            raise RemoteError(f"list {trello_list.id} doesn't exist", 404)
        self.calls.append(("card", name, trello_list.name))
        card = Card(id=self._id("c"), name=name, desc=description, id_labels=list(label_ids))
        self.cards[trello_list.id].append(card)
        return card

    def create_comment(self, text, card):
        self.calls.append(("comment", card.id))
        self.comments.setdefault(card.id, []).append(text)

    def get_boards(self, organization, visibility):
        return list(self.boards.values())

    def get_lists(self, board):
        return list(self.lists.get(board.id, []))

    def get_cards(self, trello_list):
        return list(self.cards.get(trello_list.id, []))

    # Helpers for assertions
    def list_names(self, board_id):
        return [trello_list.name for trello_list in self.lists[board_id]]

    def cards_of(self, board_id, list_name):
        for trello_list in self.lists[board_id]:
            if trello_list.name == list_name:
                return [card.name for card in self.cards[trello_list.id]]
        raise KeyError(list_name)


def make_proposal(
    id: str = "p1",
    title: str = None,
    category: str = "Back-end",
    format: str = "Conférence",
    rating: float = 3.0,
    loves: int = 0,
    hates: int = 0,
    speakers: str = "Leala Simard - Carpentras, France (Gold Medal)",
    audience_level: str = "Débutant",
    language: str = "🇫🇷",
    abstract: str = "An interesting abstract",
    private_message: str = "",
    organizer_messages: tuple = (),
) -> ProposalRecord:
    """Helper to create test proposals."""
    return ProposalRecord(
        id=id,
        title=title or f"Talk {id}",
        category=category,
        format=format,
        abstract=abstract,
        audience_level=audience_level,
        language=language,
        speakers=speakers,
        rating=rating,
        loves=loves,
        hates=hates,
        private_message=private_message,
        organizer_messages=organizer_messages,
    )


@pytest.fixture
def trello():
    """A fresh in-memory Trello."""
    return FakeTrelloClient()


@pytest.fixture
def proposal_factory():
    return make_proposal
