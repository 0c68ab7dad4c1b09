"""Org chart builder: orgs → accounts → contacts, plus lateral account links.

The result is a flat, deduplicated node/edge graph with grid positions,
ready for a diagram renderer. Building is pure: inputs are never mutated and
nothing is cached here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import quote

from app.models.chart_models import ChartEdge, ChartNode, EdgeShape, NodeKind, OrgChart
from app.models.crm_models import Account, Contact, Org
from app.services.chart_layout import AccountColumn, ChartLayoutConfig, OrgBlock, apply_layout
from app.services.focus_selector import AccountLookup, select_accounts

logger = logging.getLogger(__name__)

AccountHref = Callable[[Account], str | None]
ContactHref = Callable[[Account, Contact], str | None]


def _id_part(value: str) -> str:
    # Percent-encoded parts never contain ":" so joined ids stay unambiguous
    return quote(value, safe="")


def org_node_id(org_id: str) -> str:
    return f"org-{_id_part(org_id)}"


def account_node_id(account_id: str) -> str:
    return f"acc-{_id_part(account_id)}"


def contact_node_id(account_id: str, contact_id: str) -> str:
    # Scoped to the account: one physical contact under two accounts is two nodes
    return f"con-{_id_part(account_id)}:{_id_part(contact_id)}"


def edge_id(source: str, target: str, shape: EdgeShape) -> str:
    prefix = "link" if shape == EdgeShape.LATERAL else "e"
    return f"{prefix}-{_id_part(source)}:{_id_part(target)}"


def default_account_href(account: Account) -> str:
    return f"/crm/customer/accounts/{quote(account.id, safe='')}"


def default_contact_href(account: Account, contact: Contact) -> str:
    return f"/crm/customer/contacts?contact={quote(contact.id, safe='')}"


def _index_accounts(orgs: list[Org]) -> AccountLookup:
    index: dict[str, Account] = {}
    for org in orgs:
        for account in org.accounts:
            index.setdefault(account.id, account)
    return index.get


def dedupe_edges(edges: list[ChartEdge]) -> list[ChartEdge]:
    """Keep the first edge for each unordered (source, target) pair."""
    seen: set[frozenset[str]] = set()
    unique: list[ChartEdge] = []
    for edge in edges:
        key = frozenset((edge.source, edge.target))
        if key in seen:
            continue
        seen.add(key)
        unique.append(edge)
    return unique


def build_org_chart(
    orgs: list[Org],
    focus_account_id: str | None = None,
    *,
    layout: ChartLayoutConfig | None = None,
    lookup_account: AccountLookup | None = None,
    account_href: AccountHref | None = default_account_href,
    contact_href: ContactHref | None = default_contact_href,
) -> OrgChart:
    """Build the org chart graph for ``orgs``.

    Args:
        orgs: Orgs to render, each with its accounts.
        focus_account_id: When set, each org is narrowed to this account and
            its directly linked accounts; account nodes get is_focus/is_subtle.
        layout: Spacing constants; defaults to ChartLayoutConfig().
        lookup_account: Global account lookup used when the focus account is
            not among an org's own accounts. Defaults to an index over all
            accounts in ``orgs``.
        account_href, contact_href: Navigation targets for account and
            contact nodes. Pass None to omit links.

    Returns:
        OrgChart with unique node ids and at most one edge per node pair.
    """
    if lookup_account is None:
        lookup_account = _index_accounts(orgs)

    nodes: list[ChartNode] = []
    edges: list[ChartEdge] = []
    node_ids: set[str] = set()
    edge_ids: set[str] = set()
    blocks: list[OrgBlock] = []

    def _add_node(node: ChartNode) -> None:
        if node.id in node_ids:
            return
        node_ids.add(node.id)
        nodes.append(node)

    def _add_edge(source: str, target: str, shape: EdgeShape) -> None:
        eid = edge_id(source, target, shape)
        if eid in edge_ids:
            return
        edge_ids.add(eid)
        edges.append(ChartEdge(id=eid, source=source, target=target, shape=shape))

    has_focus = bool(focus_account_id)

    for org in orgs:
        accounts = select_accounts(org, focus_account_id, lookup_account)
        rendered_ids = {a.id for a in accounts}

        org_id = org_node_id(org.id)
        block = OrgBlock(
            org=ChartNode(id=org_id, kind=NodeKind.ORG, label=org.name, entity_id=org.id),
        )
        _add_node(block.org)
        blocks.append(block)

        for account in accounts:
            acc_id = account_node_id(account.id)
            account_node = ChartNode(
                id=acc_id,
                kind=NodeKind.ACCOUNT,
                label=account.name,
                entity_id=account.id,
                href=account_href(account) if account_href else None,
                account_number=account.account_number,
                is_focus=has_focus and account.id == focus_account_id,
                is_subtle=has_focus and account.id != focus_account_id,
            )
            _add_node(account_node)
            _add_edge(org_id, acc_id, EdgeShape.HIERARCHY)
            column = AccountColumn(account=account_node)
            block.columns.append(column)

            for linked_id in account.linked_account_ids or []:
                if linked_id == account.id:
                    continue
                if linked_id not in rendered_ids:
                    logger.debug("Skipping link %s -> %s: target not rendered", account.id, linked_id)
                    continue
                # Orient from the lexically smaller node id so both sides agree
                source, target = sorted((acc_id, account_node_id(linked_id)))
                _add_edge(source, target, EdgeShape.LATERAL)

            seen_contact_ids: set[str] = set()
            for contact in account.contacts:
                if contact.id in seen_contact_ids:
                    continue
                seen_contact_ids.add(contact.id)
                con_id = contact_node_id(account.id, contact.id)
                contact_node = ChartNode(
                    id=con_id,
                    kind=NodeKind.CONTACT,
                    label=contact.name,
                    entity_id=contact.id,
                    href=contact_href(account, contact) if contact_href else None,
                    role=contact.role,
                )
                _add_node(contact_node)
                _add_edge(acc_id, con_id, EdgeShape.HIERARCHY)
                column.contacts.append(contact_node)

    apply_layout(blocks, layout)

    unique_edges = dedupe_edges(edges)
    logger.debug(
        "build_org_chart: %d orgs, focus=%r -> %d nodes, %d edges (%d duplicate pairs dropped)",
        len(orgs), focus_account_id, len(nodes), len(unique_edges), len(edges) - len(unique_edges),
    )
    return OrgChart(nodes=nodes, edges=unique_edges)
