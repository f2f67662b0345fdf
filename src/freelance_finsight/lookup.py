# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Read-only id → record lookups built once per report run.

Every report needs to resolve a task's quote, its collaborator quotes and
the names of clients and collaborators. :class:`LookupIndex` builds those
maps a single time from a :class:`~freelance_finsight.models.Snapshot`
and is threaded through all sub-computations, so two reports computed in
the same run can never disagree about which record an id points to.

When ids are duplicated in a snapshot, the first record wins.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, TypeVar

from .models import Client, Collaborator, CollaboratorQuote, Quote, Snapshot

UNKNOWN_CLIENT = "Unknown client"

_R = TypeVar("_R")


def _index(records: Iterable[_R]) -> Mapping[str, _R]:
    by_id: dict[str, _R] = {}
    for record in records:
        by_id.setdefault(record.id, record)  # type: ignore[attr-defined]
    return MappingProxyType(by_id)


@dataclass(frozen=True)
class LookupIndex:
    """Immutable id-based lookups over one snapshot."""

    quotes: Mapping[str, Quote]
    collaborator_quotes: Mapping[str, CollaboratorQuote]
    clients: Mapping[str, Client]
    collaborators: Mapping[str, Collaborator]

    @classmethod
    def build(cls, snapshot: Snapshot) -> "LookupIndex":
        return cls(
            quotes=_index(snapshot.quotes),
            collaborator_quotes=_index(snapshot.collaborator_quotes),
            clients=_index(snapshot.clients),
            collaborators=_index(snapshot.collaborators),
        )

    def quote(self, quote_id: Optional[str]) -> Optional[Quote]:
        if quote_id is None:
            return None
        return self.quotes.get(quote_id)

    def collaborator_quote(self, cq_id: Optional[str]) -> Optional[CollaboratorQuote]:
        if cq_id is None:
            return None
        return self.collaborator_quotes.get(cq_id)

    def client_name(self, client_id: Optional[str]) -> str:
        client = self.clients.get(client_id) if client_id is not None else None
        if client is None or not client.name:
            return UNKNOWN_CLIENT
        return client.name

    def collaborator_name(self, collaborator_id: Optional[str]) -> Optional[str]:
        if collaborator_id is None:
            return None
        collaborator = self.collaborators.get(collaborator_id)
        return collaborator.name if collaborator is not None else None
