"""
Visibility scope.

Organizational isolation: a caller may compute itself and its strict
descendants only. A top-level (system operator) caller sees the whole
forest.
"""

from dataclasses import dataclass

from settlement.config.constants import ROOT_LEVEL
from settlement.services.settlement.hierarchy import HierarchyIndex
from settlement.utils.exceptions import ValidationError


@dataclass(frozen=True)
class VisibleScope:
    """Resolved scope: the subtree roots the caller may compute."""
    caller_id: str
    root_ids: tuple[str, ...]
    whole_forest: bool = False


class VisibilityScope:
    """Resolves which subtree a caller may see."""

    def __init__(self, index: HierarchyIndex) -> None:
        self.index = index

    def resolve(self, caller_id: str) -> VisibleScope:
        """
        Resolve the visible subtree roots for a caller.

        Raises:
            ValidationError: caller is unknown or is a member account
        """
        if self.index.is_member(caller_id):
            raise ValidationError(
                "Member accounts cannot request settlements",
                context={"node_id": caller_id},
            )
        if not self.index.is_partner(caller_id):
            raise ValidationError("Unknown caller", context={"node_id": caller_id})

        caller = self.index.partner(caller_id)
        if caller.level == ROOT_LEVEL:
            return VisibleScope(
                caller_id=caller_id,
                root_ids=tuple(root.id for root in self.index.roots()),
                whole_forest=True,
            )
        return VisibleScope(caller_id=caller_id, root_ids=(caller_id,))

    def can_view(self, caller_id: str, node_id: str) -> bool:
        """Check whether node_id lies inside the caller's scope."""
        scope = self.resolve(caller_id)
        if scope.whole_forest:
            return node_id in self.index
        if node_id == caller_id:
            return True
        if self.index.is_member(node_id):
            node_id = self.index.member(node_id).referrer_id
            if node_id == caller_id:
                return True
        if not self.index.is_partner(node_id):
            return False
        return any(ancestor.id == caller_id for ancestor in self.index.ancestors_of(node_id))
