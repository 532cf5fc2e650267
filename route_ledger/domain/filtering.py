"""Filter engine over classified clients, plus UI expansion state"""

from typing import Dict, Iterable, List, Sequence

from route_ledger.domain.models import ClassifiedClient, PaymentStatus, StatusFilter
from route_ledger.utils.text import normalize_search

_STATUS_BY_FILTER = {
    StatusFilter.ON_TIME: PaymentStatus.ON_TIME,
    StatusFilter.UPCOMING: PaymentStatus.UPCOMING,
    StatusFilter.DELINQUENT: PaymentStatus.DELINQUENT,
}


def matches_status(client: ClassifiedClient, status_filter: StatusFilter) -> bool:
    """ALL passes everything, including clients with no installments"""
    if status_filter == StatusFilter.ALL:
        return True
    return client.status == _STATUS_BY_FILTER[status_filter]


def matches_search(client: ClassifiedClient, search_text: str) -> bool:
    """Case-insensitive substring match on the display name; blank text passes"""
    needle = normalize_search(search_text)
    if not needle:
        return True
    return needle in client.display_name.casefold()


def filter_clients(
    clients: Sequence[ClassifiedClient],
    status_filter: StatusFilter = StatusFilter.ALL,
    search_text: str = "",
) -> List[ClassifiedClient]:
    """
    Apply the status and text predicates (AND) over classified clients.

    Stable: output keeps the input's relative order. Synchronous and
    stateless; callers debounce keystrokes before calling this.
    """
    return [
        client
        for client in clients
        if matches_status(client, status_filter) and matches_search(client, search_text)
    ]


class ExpansionState:
    """
    UI-only expanded/collapsed flags, kept apart from the domain objects.

    Keyed by client id so filtering or re-fetching the list never loses or
    misplaces a flag.
    """

    def __init__(self) -> None:
        self._expanded: Dict[str, bool] = {}

    def is_expanded(self, client_id: str) -> bool:
        return self._expanded.get(client_id, False)

    def toggle(self, client_id: str) -> bool:
        expanded = not self.is_expanded(client_id)
        self._expanded[client_id] = expanded
        return expanded

    def collapse_all(self) -> None:
        self._expanded.clear()

    def prune(self, client_ids: Iterable[str]) -> None:
        """Drop flags for clients that are no longer in the list"""
        keep = set(client_ids)
        self._expanded = {cid: flag for cid, flag in self._expanded.items() if cid in keep}
