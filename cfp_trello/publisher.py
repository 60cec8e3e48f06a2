"""
Deliberation publisher.
Accepts the talks of the "Sélection" lists, or rejects those of the "Refusés"
lists, on Conference-Hall.
"""

import logging
from enum import Enum

from .board_builder import LIST_REFUSED, LIST_SELECTION
from .conference_hall import ConferenceHallClient, Talk
from .errors import NotFoundError
from .importer import board_name
from .trello_models import Board, Card, PermissionLevel, TrelloList

logger = logging.getLogger(__name__)


class Publication(Enum):
    ACCEPT = "accept"
    REJECT = "reject"


def filter_boards(boards: list[Board], prefix: str, event_name: str, formats: list[str]) -> list[Board]:
    """Keep the deliberation boards of the event."""
    names = {board_name(prefix, event_name, format_name) for format_name in formats}
    return [board for board in boards if board.name in names]


def find_list(lists: list[TrelloList], name: str) -> TrelloList:
    for trello_list in lists:
        if trello_list.name == name:
            return trello_list
    raise NotFoundError(f"List {name} not found")


def match_talks(cards: list[Card], talks: list[Talk]) -> list[Talk]:
    """Talks of the cards, matched by title (cards are named after the trimmed talk title)."""
    talks_by_title = {talk.title.strip(" "): talk for talk in talks}
    matched = []
    for card in cards:
        if card.name not in talks_by_title:
            raise NotFoundError(f"Talk {card.name!r} not found in CFP talks")
        matched.append(talks_by_title[card.name])
    return matched


def publish(organization_name: str, cfp_client: ConferenceHallClient, trello_client,
            publication: Publication, board_name_prefix: str = "Délibération") -> list[Talk]:
    """Publish the deliberation of every board of the event and return the talks published."""
    export = cfp_client.get_export()
    organization = trello_client.get_organization(organization_name)
    boards = trello_client.get_boards(organization, PermissionLevel.ORG)

    boards = filter_boards(boards, board_name_prefix, export.name, export.formats)
    if not boards:
        raise NotFoundError(f"No deliberation board for {export.name} found in Trello")

    list_name = LIST_SELECTION if publication == Publication.ACCEPT else LIST_REFUSED
    published = []
    for board in boards:
        try:
            trello_list = find_list(trello_client.get_lists(board), list_name)
        except NotFoundError as e:
            raise NotFoundError(f"List {list_name} not found for board {board.name}") from e

        talks = match_talks(trello_client.get_cards(trello_list), export.talks)
        for talk in talks:
            if not talk.is_submitted():
                logger.info(f"Talk {talk.title} is already {talk.state}")
                continue

            logger.info(f"{publication.value.capitalize()}ing talk {talk.title}...")
            if publication == Publication.ACCEPT:
                result = cfp_client.accept(talk)
            else:
                result = cfp_client.reject(talk)
            logger.info(f"Talk {talk.title}: {result}")
            published.append(talk)

    logger.info(f"Published {len(published)} talks ({publication.value})")
    return published
