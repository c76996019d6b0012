"""
Settlement tree walker.

Computes one SettlementRow per visible node:

1. Leaf evaluation: for every partner, sum wagers, cash and points of its
   direct scope (direct members, direct child partners). Sibling nodes
   are independent and run concurrently in a task group under a
   semaphore; an unexpected failure cancels the remaining siblings.
2. Bottom-up fold: in post-order, pool wager volume upward and apply each
   node's own rates to its pooled volume. Individual commission is the
   node's aggregate minus the aggregates of its direct children.
3. Rows are emitted in depth-first pre-order: a partner, its child
   partners recursively, then its direct members.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TypeVar

from loguru import logger

from commission import (
    GAME_CATEGORIES,
    CommissionBreakdown,
    CommissionCalculator,
    CommissionRates,
    PaddingCutPolicy,
    WagerTotals,
)
from settlement.config.constants import (
    CASH_COLLABORATOR,
    DEFAULT_MAX_CONCURRENCY,
    MEMBER_LEVEL,
    POINT_COLLABORATOR,
    WAGER_COLLABORATOR,
)
from settlement.models.enums import NodeType
from settlement.services.settlement.activity import ActivityAggregator
from settlement.services.settlement.cash_flow import CashFlowAggregator
from settlement.services.settlement.dto import (
    CashTotals,
    CategoryFigures,
    DateRange,
    MemberNode,
    PartnerNode,
    PointTotals,
    SettlementRow,
)
from settlement.services.settlement.hierarchy import HierarchyIndex
from settlement.services.settlement.visibility import VisibleScope
from settlement.utils.exceptions import DataUnavailableError

T = TypeVar("T")

ZERO = Decimal("0")


async def _run_all(coros: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """
    Run coroutines in one task group and return their results in order.

    The first failure cancels the remaining tasks and is re-raised
    unwrapped, so callers see the original exception type.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except ExceptionGroup as errors:
        raise errors.exceptions[0] from None
    return [task.result() for task in tasks]


@dataclass
class NodeActivity:
    """Direct-scope source figures of one partner."""
    member_wagers: dict[str, WagerTotals]
    cash_by_subject: dict[str, CashTotals]
    member_points: dict[str, PointTotals]
    complete: bool = True


@dataclass
class FoldedNode:
    """Fold result of one node, consumed by its parent."""
    pooled: WagerTotals
    breakdown: CommissionBreakdown
    pooled_online_deposit: Decimal
    pooled_online_withdrawal: Decimal
    complete: bool
    row: SettlementRow


class SettlementTreeWalker:
    """
    Post-order settlement walk over a visible subtree.

    Args:
        activity: Wager aggregator
        cash_flow: Cash and point aggregator
        calculator: Commission arithmetic
        max_concurrency: Concurrent leaf evaluations
    """

    def __init__(
        self,
        activity: ActivityAggregator,
        cash_flow: CashFlowAggregator,
        calculator: CommissionCalculator | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self.activity = activity
        self.cash_flow = cash_flow
        self.calculator = calculator or CommissionCalculator()
        self.max_concurrency = max_concurrency

    async def walk(
        self,
        index: HierarchyIndex,
        scope: VisibleScope,
        date_range: DateRange,
        policy: PaddingCutPolicy,
        vendor: str | None = None,
    ) -> list[SettlementRow]:
        """
        Compute rows for every node of the scope.

        Args:
            index: Validated hierarchy
            scope: Resolved visible subtree roots
            date_range: Inclusive range
            policy: Padding-cut policy over a pinned config snapshot
            vendor: Optional vendor filter for wagers

        Returns:
            Rows in depth-first pre-order
        """
        partners = index.post_order(scope.root_ids)
        activities = await self._evaluate_leaves(index, partners, date_range, vendor)

        folded: dict[str, FoldedNode] = {}
        member_rows: dict[str, list[SettlementRow]] = {}
        depths = {node.id: depth for node, depth in index.pre_order(scope.root_ids)}

        for partner in partners:
            members = index.members_of(partner.id)
            activity = activities[partner.id]
            depth = depths[partner.id]

            member_results = [
                self._fold_member(index, member, activity, date_range, policy, depth + 1)
                for member in members
            ]
            child_results = [folded[child.id] for child in index.direct_children_of(partner.id)]
            member_rows[partner.id] = [result.row for result in member_results]

            folded[partner.id] = self._fold_partner(
                index,
                partner,
                activity,
                member_results + child_results,
                date_range,
                policy,
                depth,
            )

        return self._emit_rows(index, scope, folded, member_rows)

    # === Leaf evaluation ===

    async def _evaluate_leaves(
        self,
        index: HierarchyIndex,
        partners: list[PartnerNode],
        date_range: DateRange,
        vendor: str | None,
    ) -> dict[str, NodeActivity]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def evaluate(partner: PartnerNode) -> tuple[str, NodeActivity]:
            async with semaphore:
                return partner.id, await self._evaluate_node(index, partner, date_range, vendor)

        return dict(await _run_all(evaluate(partner) for partner in partners))

    async def _evaluate_node(
        self,
        index: HierarchyIndex,
        partner: PartnerNode,
        date_range: DateRange,
        vendor: str | None,
    ) -> NodeActivity:
        member_ids = [member.id for member in index.members_of(partner.id)]
        child_ids = [child.id for child in index.direct_children_of(partner.id)]

        (wagers, wagers_ok), (cash, cash_ok), (points, points_ok) = await _run_all(
            [
                self._degrade(
                    lambda: self.activity.sum_wagers_by_account(member_ids, date_range, vendor),
                    lambda: {member_id: WagerTotals() for member_id in member_ids},
                    WAGER_COLLABORATOR,
                    partner.id,
                    date_range,
                ),
                self._degrade(
                    lambda: self.cash_flow.sum_cash_by_subject(member_ids, child_ids, date_range),
                    lambda: {subject: CashTotals() for subject in [*member_ids, *child_ids]},
                    CASH_COLLABORATOR,
                    partner.id,
                    date_range,
                ),
                self._degrade(
                    lambda: self.cash_flow.sum_points_by_account(member_ids, date_range),
                    lambda: {member_id: PointTotals() for member_id in member_ids},
                    POINT_COLLABORATOR,
                    partner.id,
                    date_range,
                ),
            ]
        )
        return NodeActivity(
            member_wagers=wagers,
            cash_by_subject=cash,
            member_points=points,
            complete=wagers_ok and cash_ok and points_ok,
        )

    async def _degrade(
        self,
        fetch: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
        collaborator: str,
        node_id: str,
        date_range: DateRange,
    ) -> tuple[T, bool]:
        """Run a leaf query; a collaborator failure yields zeros for this node."""
        try:
            return await fetch(), True
        except DataUnavailableError as e:
            logger.bind(
                node_id=node_id,
                collaborator=collaborator,
                **date_range.as_context(),
                error=str(e),
            ).warning(f"Leaf figures degraded to zero for node {node_id}")
            return fallback(), False

    # === Fold ===

    def _figures(
        self,
        pooled: WagerTotals,
        aggregate: CommissionBreakdown,
        children: list[CommissionBreakdown],
        cut: dict[str, Decimal],
    ) -> dict[str, CategoryFigures]:
        figures = {}
        for category in GAME_CATEGORIES:
            own = aggregate.for_category(category)
            children_rolling = sum((c.for_category(category).rolling for c in children), ZERO)
            children_losing = sum((c.for_category(category).losing for c in children), ZERO)
            figures[category] = CategoryFigures(
                bet=pooled.bet(category),
                win=pooled.win(category),
                aggregate_rolling=own.rolling,
                aggregate_losing=own.losing,
                individual_rolling=own.rolling - children_rolling,
                individual_losing=own.losing - children_losing,
                cut_amount=cut.get(category, ZERO),
            )
        return figures

    def _fold_member(
        self,
        index: HierarchyIndex,
        member: MemberNode,
        activity: NodeActivity,
        date_range: DateRange,
        policy: PaddingCutPolicy,
        depth: int,
    ) -> FoldedNode:
        rates = index.member_rates(member)
        wagers = activity.member_wagers.get(member.id, WagerTotals())
        breakdown = self.calculator.calculate(wagers, rates)
        cut = policy.cut_by_category(breakdown.rolling_by_category(), MEMBER_LEVEL)
        figures = self._figures(wagers, breakdown, [], cut)
        cash = activity.cash_by_subject.get(member.id, CashTotals())

        row = SettlementRow(
            node_id=member.id,
            node_type=NodeType.MEMBER,
            username=member.username,
            level=MEMBER_LEVEL,
            parent_id=member.referrer_id,
            depth=depth,
            date_range=date_range,
            rates=rates,
            has_children=False,
            casino=figures["casino"],
            slot=figures["slot"],
            cash=cash,
            pooled_online_deposit=cash.online_deposit,
            pooled_online_withdrawal=cash.online_withdrawal,
            points=activity.member_points.get(member.id, PointTotals()),
            balance=member.balance,
            point_balance=member.point_balance,
            padding_config_version=policy.config.version,
            data_complete=activity.complete,
        )
        return FoldedNode(
            pooled=wagers,
            breakdown=breakdown,
            pooled_online_deposit=cash.online_deposit,
            pooled_online_withdrawal=cash.online_withdrawal,
            complete=activity.complete,
            row=row,
        )

    def _fold_partner(
        self,
        index: HierarchyIndex,
        partner: PartnerNode,
        activity: NodeActivity,
        children: list[FoldedNode],
        date_range: DateRange,
        policy: PaddingCutPolicy,
        depth: int,
    ) -> FoldedNode:
        pooled = sum((child.pooled for child in children), WagerTotals())
        rates: CommissionRates = partner.rates
        breakdown = self.calculator.calculate(pooled, rates)
        cut = policy.cut_by_category(breakdown.rolling_by_category(), partner.level)
        figures = self._figures(pooled, breakdown, [child.breakdown for child in children], cut)

        direct_cash = sum(activity.cash_by_subject.values(), CashTotals())
        points = sum(activity.member_points.values(), PointTotals())
        pooled_online_deposit = sum((child.pooled_online_deposit for child in children), ZERO)
        pooled_online_withdrawal = sum(
            (child.pooled_online_withdrawal for child in children), ZERO
        )
        complete = activity.complete and all(child.complete for child in children)

        row = SettlementRow(
            node_id=partner.id,
            node_type=NodeType.PARTNER,
            username=partner.username,
            level=partner.level,
            parent_id=partner.parent_id,
            depth=depth,
            date_range=date_range,
            rates=rates,
            has_children=index.has_children(partner.id),
            casino=figures["casino"],
            slot=figures["slot"],
            cash=direct_cash,
            pooled_online_deposit=pooled_online_deposit,
            pooled_online_withdrawal=pooled_online_withdrawal,
            points=points,
            balance=partner.balance,
            point_balance=partner.point_balance,
            padding_config_version=policy.config.version,
            data_complete=complete,
        )
        return FoldedNode(
            pooled=pooled,
            breakdown=breakdown,
            pooled_online_deposit=pooled_online_deposit,
            pooled_online_withdrawal=pooled_online_withdrawal,
            complete=complete,
            row=row,
        )

    # === Output ===

    def _emit_rows(
        self,
        index: HierarchyIndex,
        scope: VisibleScope,
        folded: dict[str, FoldedNode],
        member_rows: dict[str, list[SettlementRow]],
    ) -> list[SettlementRow]:
        rows: list[SettlementRow] = []
        # (partner_id, emit_members): members follow the partner's whole subtree
        stack: list[tuple[str, bool]] = [(root_id, False) for root_id in reversed(scope.root_ids)]
        while stack:
            partner_id, emit_members = stack.pop()
            if emit_members:
                rows.extend(member_rows[partner_id])
                continue
            rows.append(folded[partner_id].row)
            stack.append((partner_id, True))
            stack.extend(
                (child.id, False) for child in reversed(index.direct_children_of(partner_id))
            )
        return rows
