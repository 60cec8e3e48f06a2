"""
Deliberation tiers.
Splits the proposals of each category into three tiers ranked by rating.
"""

import logging
import math
from dataclasses import dataclass, field

from .errors import InvalidInputError
from .proposal import ProposalRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryTiers:
    """The ranked proposals of one category, split in three contiguous slices."""
    category: str
    first: list[ProposalRecord]
    second: list[ProposalRecord]
    third: list[ProposalRecord]

    @property
    def size(self) -> int:
        return len(self.first) + len(self.second) + len(self.third)


@dataclass(frozen=True)
class TieringResult:
    """Tiers of every category, in category order, and their pooled third tiers."""
    categories: list[CategoryTiers] = field(default_factory=list)
    combined_overflow: list[ProposalRecord] = field(default_factory=list)


def rank(proposals: list[ProposalRecord]) -> list[ProposalRecord]:
    """Sort by rating, best first. The sort is stable: ties keep their input order."""
    return sorted(proposals, key=lambda p: p.rating, reverse=True)


def split_in_thirds(ranked: list[ProposalRecord]) -> tuple[list, list, list]:
    """Split into slices of ceil(n/3), ceil(n/3) and the remainder."""
    size = math.ceil(len(ranked) / 3)
    return ranked[:size], ranked[size:size * 2], ranked[size * 2:]


def group_by_category(proposals: list[ProposalRecord]) -> dict[str, list[ProposalRecord]]:
    """Group proposals by category, keeping input order within each group."""
    groups: dict[str, list[ProposalRecord]] = {}
    for proposal in proposals:
        if not proposal.category or not proposal.category.strip():
            raise InvalidInputError(f"Proposal {proposal.id} ({proposal.title!r}) has no category")
        groups.setdefault(proposal.category, []).append(proposal)
    return groups


def partition(proposals: list[ProposalRecord]) -> TieringResult:
    """Partition proposals into per-category tiers and one combined third tier.

    Categories are processed in lexicographic order. The combined third tier
    is the concatenation of each category's last slice in that order; it is
    not re-ranked across categories.
    """
    groups = group_by_category(proposals)

    result = TieringResult()
    for category in sorted(groups):
        first, second, third = split_in_thirds(rank(groups[category]))
        result.categories.append(CategoryTiers(category, first, second, third))
        result.combined_overflow.extend(third)
        logger.debug(
            f"Category {category}: {len(first)} T1, {len(second)} T2, {len(third)} T3"
        )

    return result
