"""Unit tests for the filter engine and expansion side-table"""

import pytest
from route_ledger.domain.filtering import ExpansionState, filter_clients
from route_ledger.domain.models import StatusFilter


def test_all_with_blank_search_is_identity(sample_clients):
    assert filter_clients(sample_clients, StatusFilter.ALL, "") == sample_clients
    assert filter_clients(sample_clients, StatusFilter.ALL, "   ") == sample_clients


def test_all_includes_clients_without_installments(sample_clients):
    ids = [c.client_id for c in filter_clients(sample_clients, StatusFilter.ALL)]
    assert "c4" in ids


@pytest.mark.parametrize(
    "status_filter, expected",
    [
        (StatusFilter.ON_TIME, ["c2"]),
        (StatusFilter.UPCOMING, ["c1", "c5"]),
        (StatusFilter.DELINQUENT, ["c3"]),
    ],
)
def test_status_filter_exact_match(sample_clients, status_filter, expected):
    result = filter_clients(sample_clients, status_filter)
    assert [c.client_id for c in result] == expected


def test_search_is_case_insensitive_substring(sample_clients):
    result = filter_clients(sample_clients, StatusFilter.ALL, "SOUZA")
    assert [c.display_name for c in result] == ["ana souza"]


def test_search_ignores_surrounding_whitespace(sample_clients):
    result = filter_clients(sample_clients, StatusFilter.ALL, "  bruno ")
    assert [c.client_id for c in result] == ["c3"]


def test_predicates_are_combined(sample_clients):
    """'b' matches Bruno (delinquent) and Beatriz (upcoming)"""
    result = filter_clients(sample_clients, StatusFilter.UPCOMING, "b")
    assert [c.client_id for c in result] == ["c5"]


def test_filter_does_not_mutate_source(sample_clients):
    before = list(sample_clients)
    filter_clients(sample_clients, StatusFilter.DELINQUENT, "x")
    assert sample_clients == before


def test_no_match_returns_empty(sample_clients):
    assert filter_clients(sample_clients, StatusFilter.ON_TIME, "zzz") == []


def test_expansion_state_is_keyed_by_client_id(sample_clients):
    """Flags survive filtering because they never live on the list items"""
    state = ExpansionState()
    assert state.toggle("c3") is True

    filtered = filter_clients(sample_clients, StatusFilter.DELINQUENT)
    assert state.is_expanded(filtered[0].client_id)
    assert not state.is_expanded("c1")

    assert state.toggle("c3") is False


def test_expansion_prune_and_collapse():
    state = ExpansionState()
    state.toggle("a")
    state.toggle("b")

    state.prune(["b"])
    assert not state.is_expanded("a")
    assert state.is_expanded("b")

    state.collapse_all()
    assert not state.is_expanded("b")
