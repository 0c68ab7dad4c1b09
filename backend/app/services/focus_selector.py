"""Focus subgraph selection: an account plus its directly linked accounts."""

from __future__ import annotations

import logging
from collections.abc import Callable

from app.models.crm_models import Account, Org

logger = logging.getLogger(__name__)

AccountLookup = Callable[[str], Account | None]


def select_accounts(
    org: Org,
    focus_account_id: str | None = None,
    lookup_account: AccountLookup | None = None,
) -> list[Account]:
    """Return the accounts of ``org`` to render.

    Without a focus account every account is returned in stored order. With
    one, the result is the focus account, the accounts it links to and the
    accounts linking to it, kept in the org's own order.

    An unknown focus account, or one owned by a different org, yields an
    empty list.
    """
    all_accounts = list(org.accounts)
    if not focus_account_id:
        return all_accounts

    focus = next((a for a in all_accounts if a.id == focus_account_id), None)
    if focus is None and lookup_account is not None:
        focus = lookup_account(focus_account_id)
    if focus is None or focus.org_id != org.id:
        logger.debug(
            "select_accounts(%s): focus account %r not in org, nothing to show",
            org.id, focus_account_id,
        )
        return []

    ids_to_show = {focus_account_id}
    ids_to_show.update(focus.linked_account_ids or [])
    ids_to_show.update(
        a.id for a in all_accounts
        if focus_account_id in (a.linked_account_ids or [])
    )
    return [a for a in all_accounts if a.id in ids_to_show]
