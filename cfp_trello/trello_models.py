"""
Trello object model.
Handles returned by the Trello REST API, kept to the fields the importer uses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PermissionLevel(Enum):
    """Board visibility."""
    ORG = "org"
    PUBLIC = "public"
    PRIVATE = "private"


class Color(Enum):
    """Label colors. Trello displays labels of a card ordered by color."""
    YELLOW = "yellow"
    PURPLE = "purple"
    BLUE = "blue"
    RED = "red"
    GREEN = "green"
    ORANGE = "orange"
    BLACK = "black"
    SKY = "sky"
    LIME = "lime"
    PINK = "pink"


@dataclass
class Member:
    id: str
    username: str
    full_name: str

    @classmethod
    def from_api(cls, data: dict) -> "Member":
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            full_name=data.get("fullName", ""),
        )


@dataclass
class Organization:
    id: str
    name: str
    display_name: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Organization":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            display_name=data.get("displayName", ""),
        )


@dataclass
class Board:
    id: str
    name: str
    url: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Board":
        return cls(id=data["id"], name=data.get("name", ""), url=data.get("url", ""))


@dataclass
class TrelloList:
    id: str
    name: str
    pos: Optional[float] = None

    @classmethod
    def from_api(cls, data: dict) -> "TrelloList":
        return cls(id=data["id"], name=data.get("name", ""), pos=data.get("pos"))


@dataclass
class Label:
    id: str
    name: str
    color: Optional[Color] = None

    @classmethod
    def from_api(cls, data: dict) -> "Label":
        color = data.get("color")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            color=Color(color) if color else None,
        )


@dataclass
class Card:
    id: str
    name: str
    desc: str = ""
    id_labels: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Card":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            desc=data.get("desc", ""),
            id_labels=list(data.get("idLabels", [])),
        )
