"""Flow graph builder - three-tier income -> balance -> expense money flow"""

from decimal import Decimal
from typing import List, Mapping, Optional, Sequence

from ledger_analytics.domain.categories import sum_by_category
from ledger_analytics.domain.exceptions import InvalidSubtypeError, InvariantViolationError
from ledger_analytics.domain.models import (
    CALLER_SUBTYPES,
    COLUMN_BALANCE,
    COLUMN_EXPENSE,
    COLUMN_INCOME,
    EXPENSE,
    INCOME,
    SUBTYPE_DEFICIT,
    SUBTYPE_REGULAR,
    SUBTYPE_UNALLOCATED,
    ZERO,
    MoneyFlow,
    MoneyFlowLink,
    MoneyFlowNode,
    NormalizedTransaction,
)

BALANCE_NODE_ID = "balance"
DEFICIT_NODE_ID = "synthetic:deficit"
UNALLOCATED_NODE_ID = "synthetic:unallocated"

BALANCE_NODE_NAME = "Saldo"
DEFICIT_NODE_NAME = "Déficit"
UNALLOCATED_NODE_NAME = "Não alocado"


def income_node_id(category: str) -> str:
    return f"income:{category}"


def expense_node_id(category: str) -> str:
    return f"expense:{category}"


def validate_subtypes(category_subtypes: Optional[Mapping[str, str]]) -> None:
    """
    Raises:
        InvalidSubtypeError: If a category is tagged with anything but
            regular, goal, investment or debt
    """
    for category, subtype in (category_subtypes or {}).items():
        if subtype not in CALLER_SUBTYPES:
            raise InvalidSubtypeError(
                f"category {category!r} tagged {subtype!r}, expected one of {CALLER_SUBTYPES}"
            )


def check_conservation(flow: MoneyFlow) -> None:
    """
    Verify that value into the balance node equals value out of it.

    Raises:
        InvariantViolationError: On any imbalance
    """
    inbound = sum((link.value for link in flow.links if link.target_id == BALANCE_NODE_ID), ZERO)
    outbound = sum((link.value for link in flow.links if link.source_id == BALANCE_NODE_ID), ZERO)
    if inbound != outbound:
        raise InvariantViolationError(
            f"money flow not conserved: {inbound} into balance, {outbound} out"
        )


def build_money_flow(
    entries: Sequence[NormalizedTransaction],
    category_subtypes: Optional[Mapping[str, str]] = None,
) -> MoneyFlow:
    """
    Build the income -> balance -> expense graph.

    Columns:
    - income: one node per income category, linked into the balance node
    - balance: a single node carrying max(income, expenses)
    - expense: one node per expense category, linked from the balance node,
      subtype taken from category_subtypes (default "regular")

    Conservation (inflow == outflow at the balance node):
    - income >= expenses: synthetic "unallocated" expense node carries
      income - expenses (zero included)
    - expenses > income: synthetic "deficit" income node carries
      expenses - income

    Nodes and links come out in a fixed order: income nodes (largest first,
    then by name), deficit, balance, expense nodes (same order), unallocated.

    Raises:
        InvalidSubtypeError: On unknown caller subtypes
        InvariantViolationError: If the graph ends up unbalanced
    """
    validate_subtypes(category_subtypes)
    if not entries:
        return MoneyFlow()

    subtypes = category_subtypes or {}
    income_totals = sum_by_category(entries, INCOME)
    expense_totals = sum_by_category(entries, EXPENSE)
    total_income = sum((amount for _, amount in income_totals), ZERO)
    total_expenses = sum((amount for _, amount in expense_totals), ZERO)

    nodes: List[MoneyFlowNode] = []
    links: List[MoneyFlowLink] = []

    for category, amount in income_totals:
        node_id = income_node_id(category)
        nodes.append(MoneyFlowNode(node_id, category, COLUMN_INCOME, amount))
        links.append(MoneyFlowLink(node_id, BALANCE_NODE_ID, amount))

    shortfall = total_expenses - total_income
    if shortfall > 0:
        nodes.append(MoneyFlowNode(DEFICIT_NODE_ID, DEFICIT_NODE_NAME, COLUMN_INCOME, shortfall, SUBTYPE_DEFICIT))
        links.append(MoneyFlowLink(DEFICIT_NODE_ID, BALANCE_NODE_ID, shortfall))

    balance_value: Decimal = max(total_income, total_expenses)
    nodes.append(MoneyFlowNode(BALANCE_NODE_ID, BALANCE_NODE_NAME, COLUMN_BALANCE, balance_value))

    for category, amount in expense_totals:
        node_id = expense_node_id(category)
        subtype = subtypes.get(category, SUBTYPE_REGULAR)
        nodes.append(MoneyFlowNode(node_id, category, COLUMN_EXPENSE, amount, subtype))
        links.append(MoneyFlowLink(BALANCE_NODE_ID, node_id, amount))

    if shortfall <= 0:
        leftover = total_income - total_expenses
        nodes.append(
            MoneyFlowNode(UNALLOCATED_NODE_ID, UNALLOCATED_NODE_NAME, COLUMN_EXPENSE, leftover, SUBTYPE_UNALLOCATED)
        )
        links.append(MoneyFlowLink(BALANCE_NODE_ID, UNALLOCATED_NODE_ID, leftover))

    flow = MoneyFlow(nodes=tuple(nodes), links=tuple(links))
    check_conservation(flow)
    return flow
