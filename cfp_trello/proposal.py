"""
Proposal model for CFP to Trello.
Normalized, read-only view of the talks found in a CFP export.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProposalRecord:
    """A talk proposal with its review scores."""
    id: str
    title: str
    category: str
    format: str
    abstract: str
    audience_level: str
    language: str
    speakers: str  # Already joined with " / "
    rating: float
    loves: int = 0
    hates: int = 0
    private_message: str = ""
    organizer_messages: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Event:
    """A CFP event: its name, its proposals and the formats/categories they use."""
    name: str
    proposals: tuple[ProposalRecord, ...]
    formats: tuple[str, ...]
    categories: tuple[str, ...]

    def get_proposals(self, format_name: str) -> list[ProposalRecord]:
        """Proposals submitted in the given format, in export order."""
        return [p for p in self.proposals if p.format == format_name]
