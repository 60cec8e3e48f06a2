"""
Label cache.
Trello labels must exist before cards use them; cards sharing a label reuse one.
"""

import logging

from .trello_models import Board, Color

logger = logging.getLogger(__name__)


class LabelCache:
    """Run-scoped map of (name, board id, color) to Trello label id.

    Not thread-safe: the import creates labels one at a time.
    """

    def __init__(self, client):
        self.client = client
        self._labels: dict[tuple[str, str, Color], str] = {}

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, key: tuple[str, str, Color]) -> bool:
        return key in self._labels

    def get_or_create(self, name: str, board: Board, color: Color) -> str:
        """Return the id of the label, creating it on the board the first time."""
        # Colors are reused across boards, so the board is part of the key
        key = (name, board.id, color)
        label_id = self._labels.get(key)
        if label_id is not None:
            return label_id

        label = self.client.create_label(name, board, color)
        self._labels[key] = label.id
        logger.debug(f"Created label {name!r} ({color.value}) on board {board.id}")
        return label.id
