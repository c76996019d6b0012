"""
Hierarchy index.

Holds the whole partner tree and the partner -> member mapping in memory,
built once per request and validated before any figure is computed.
All traversals are iterative over child-index lists.
"""

from collections.abc import Iterable

from loguru import logger

from commission import CommissionRates
from settlement.config.constants import DIRECTORY_COLLABORATOR, LEAF_PARTNER_LEVEL, ROOT_LEVEL
from settlement.services.settlement.dto import MemberNode, PartnerNode
from settlement.services.settlement.sources import PartnerDirectory
from settlement.utils.exceptions import ConfigurationError, ValidationError


def _sort_key(node: PartnerNode | MemberNode) -> tuple[str, str]:
    return (node.username, node.id)


class HierarchyIndex:
    """
    In-memory partner tree with member leaves.

    Raises ConfigurationError on construction when the tree is malformed:
    duplicate ids, missing parent or referrer, cycles, levels outside
    1..6, roots not at level 1 or a parent/child level step other than 1.
    """

    def __init__(
        self,
        partners: Iterable[PartnerNode],
        members: Iterable[MemberNode] = (),
    ) -> None:
        self._partners: dict[str, PartnerNode] = {}
        self._members: dict[str, MemberNode] = {}
        self._children: dict[str, list[str]] = {}
        self._members_by_referrer: dict[str, list[str]] = {}
        self._roots: list[str] = []

        for partner in partners:
            if partner.id in self._partners:
                raise ConfigurationError(
                    "Duplicate partner id", context={"node_id": partner.id}
                )
            self._partners[partner.id] = partner

        for member in members:
            if member.id in self._members or member.id in self._partners:
                raise ConfigurationError(
                    "Member id collides with another node", context={"node_id": member.id}
                )
            self._members[member.id] = member

        self._link_partners()
        self._detect_cycles()
        self._validate_levels()
        self._link_members()

    @classmethod
    async def load(cls, directory: PartnerDirectory) -> "HierarchyIndex":
        """
        Load the full directory and build a validated index.

        Collaborator failures propagate: the tree shape cannot be
        defaulted safely.
        """
        partners = list(await directory.list_partners())
        members = list(await directory.list_members([p.id for p in partners]))
        logger.bind(
            collaborator=DIRECTORY_COLLABORATOR,
            partners=len(partners),
            members=len(members),
        ).debug("Hierarchy loaded")
        return cls(partners, members)

    # === Construction ===

    def _link_partners(self) -> None:
        for partner in self._partners.values():
            if partner.parent_id is None:
                self._roots.append(partner.id)
                continue
            if partner.parent_id not in self._partners:
                raise ConfigurationError(
                    "Partner references a nonexistent parent",
                    context={"node_id": partner.id, "parent_id": partner.parent_id},
                )
            self._children.setdefault(partner.parent_id, []).append(partner.id)

        self._roots.sort(key=lambda pid: _sort_key(self._partners[pid]))
        for child_ids in self._children.values():
            child_ids.sort(key=lambda pid: _sort_key(self._partners[pid]))

    def _detect_cycles(self) -> None:
        """Walk every parent chain; a chain that revisits itself is a cycle."""
        settled: set[str] = set()
        for start in self._partners:
            path: list[str] = []
            on_path: set[str] = set()
            current: str | None = start
            while current is not None and current not in settled:
                if current in on_path:
                    cycle = path[path.index(current):]
                    logger.bind(cycle=cycle).error("Cyclic partner hierarchy detected")
                    raise ConfigurationError(
                        "Cyclic partner hierarchy",
                        context={"node_id": current, "cycle": " -> ".join(cycle + [current])},
                    )
                path.append(current)
                on_path.add(current)
                current = self._partners[current].parent_id
            settled.update(path)

    def _validate_levels(self) -> None:
        for partner in self._partners.values():
            if not ROOT_LEVEL <= partner.level <= LEAF_PARTNER_LEVEL:
                raise ConfigurationError(
                    "Partner level out of range",
                    context={"node_id": partner.id, "level": partner.level},
                )
            if partner.parent_id is None:
                if partner.level != ROOT_LEVEL:
                    raise ConfigurationError(
                        "Root partner must be at the top level",
                        context={"node_id": partner.id, "level": partner.level},
                    )
                continue
            parent = self._partners[partner.parent_id]
            if partner.level != parent.level + 1:
                raise ConfigurationError(
                    "Partner level must be exactly one below its parent",
                    context={
                        "node_id": partner.id,
                        "level": partner.level,
                        "parent_id": parent.id,
                        "parent_level": parent.level,
                    },
                )

    def _link_members(self) -> None:
        for member in self._members.values():
            if member.referrer_id not in self._partners:
                raise ConfigurationError(
                    "Member references a nonexistent referrer",
                    context={"node_id": member.id, "referrer_id": member.referrer_id},
                )
            self._members_by_referrer.setdefault(member.referrer_id, []).append(member.id)
        for member_ids in self._members_by_referrer.values():
            member_ids.sort(key=lambda mid: _sort_key(self._members[mid]))

    # === Lookups ===

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._partners or node_id in self._members

    def __len__(self) -> int:
        return len(self._partners)

    def is_partner(self, node_id: str) -> bool:
        return node_id in self._partners

    def is_member(self, node_id: str) -> bool:
        return node_id in self._members

    def partner(self, node_id: str) -> PartnerNode:
        try:
            return self._partners[node_id]
        except KeyError:
            raise ValidationError("Unknown partner", context={"node_id": node_id}) from None

    def member(self, member_id: str) -> MemberNode:
        try:
            return self._members[member_id]
        except KeyError:
            raise ValidationError("Unknown member", context={"node_id": member_id}) from None

    def roots(self) -> list[PartnerNode]:
        return [self._partners[pid] for pid in self._roots]

    def direct_children_of(self, node_id: str) -> list[PartnerNode]:
        """Direct child partners, ordered by username then id."""
        self.partner(node_id)
        return [self._partners[pid] for pid in self._children.get(node_id, [])]

    def members_of(self, node_id: str) -> list[MemberNode]:
        """Member accounts referred directly by node_id."""
        self.partner(node_id)
        return [self._members[mid] for mid in self._members_by_referrer.get(node_id, [])]

    def descendants_of(self, node_id: str) -> set[PartnerNode]:
        """All partners below node_id (transitive, excluding the node)."""
        return {
            self._partners[pid]
            for pid in self._walk_ids([node_id])
            if pid != node_id
        }

    def accounts_under(self, node_id: str) -> set[MemberNode]:
        """Members referred by node_id or any of its descendants."""
        return {
            self._members[mid]
            for pid in self._walk_ids([node_id])
            for mid in self._members_by_referrer.get(pid, [])
        }

    def ancestors_of(self, node_id: str) -> list[PartnerNode]:
        """Parent chain from the direct parent up to the root."""
        chain: list[PartnerNode] = []
        parent_id = self.partner(node_id).parent_id
        while parent_id is not None:
            parent = self._partners[parent_id]
            chain.append(parent)
            parent_id = parent.parent_id
        return chain

    def member_rates(self, member: MemberNode) -> CommissionRates:
        """Effective member rates, falling back to the referrer's per field."""
        return member.effective_rates(self._partners[member.referrer_id].rates)

    def has_children(self, node_id: str) -> bool:
        return bool(self._children.get(node_id) or self._members_by_referrer.get(node_id))

    # === Traversals ===

    def _walk_ids(self, root_ids: Iterable[str]) -> list[str]:
        ordered: list[str] = []
        stack = list(reversed(list(root_ids)))
        for root_id in stack:
            self.partner(root_id)
        while stack:
            current = stack.pop()
            ordered.append(current)
            stack.extend(reversed(self._children.get(current, [])))
        return ordered

    def pre_order(self, root_ids: Iterable[str]) -> list[tuple[PartnerNode, int]]:
        """Partners in depth-first pre-order with their depth below the roots."""
        result: list[tuple[PartnerNode, int]] = []
        stack = [(root_id, 0) for root_id in reversed(list(root_ids))]
        for root_id, _ in stack:
            self.partner(root_id)
        while stack:
            current, depth = stack.pop()
            result.append((self._partners[current], depth))
            stack.extend((child, depth + 1) for child in reversed(self._children.get(current, [])))
        return result

    def post_order(self, root_ids: Iterable[str]) -> list[PartnerNode]:
        """Partners ordered so every node follows all of its descendants."""
        return [node for node, _ in reversed(self.pre_order(root_ids))]
