"""Client registry helpers: which client record belongs to which partner slot.

The mapping is validated when the registry is saved, so the profit split
receives an explicit ``slot -> client id`` dict instead of scanning clients.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from ..config import FinanceConfig
from ..exceptions import DuplicatePartnerLink
from ..records import Client

logger = logging.getLogger(__name__)


def partner_links(clients: Iterable[Client], config: FinanceConfig, *, strict: bool = False) -> dict[str, str]:
    """Return ``{partner slot: client id}`` for the deduction-eligible partners.

    A client is linked by its ``partner_name`` alone; unticking ``is_partner``
    in the registry keeps the name, and the deduction still applies.

    ``strict`` raises ``DuplicatePartnerLink`` when a slot has more than one
    client. Otherwise the first client wins and a warning is logged, so a
    registry saved before validation existed never breaks a calculation.
    """
    eligible = {p.slot for p in config.deduction_partners}
    found: dict[str, list[str]] = defaultdict(list)
    for client in clients:
        if client.partner_name in eligible:
            found[client.partner_name].append(client.id)

    links = {}
    for slot, client_ids in found.items():
        if len(client_ids) > 1:
            if strict:
                raise DuplicatePartnerLink(slot, client_ids)
            logger.warning(
                "Partner %s linked to clients %s; using %s", slot, client_ids, client_ids[0]
            )
        links[slot] = client_ids[0]
    return links


def save_clients(store, clients: list[Client], config: FinanceConfig) -> dict[str, str]:
    """Validate partner links and upsert the whole registry."""
    links = partner_links(clients, config, strict=True)
    store.upsert_many("clients", [c.to_row() for c in clients])
    logger.info("Saved %s clients (partner links: %s)", len(clients), links)
    return links


def load_clients(store) -> list[Client]:
    return [Client.from_row(row) for row in store.list_all("clients")]
