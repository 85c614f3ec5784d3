"""Tests for TransferProtocol."""

from __future__ import annotations

import pytest

from ctmap.application.use_cases.transfer import TransferProtocol
from ctmap.domain.errors import NotFoundError, PreconditionViolation


@pytest.fixture
def transfer(seeded_store):
    return TransferProtocol(seeded_store)


def test_request_sets_pending_request(transfer, clock):
    a = transfer.request_transfer("asn_099", "u1")
    assert a.transfer_request.requested_by == "u1"
    assert a.transfer_request.requested_at == clock()
    assert a.audit_trail[-1].action == "TRANSFER_REQUESTED"


def test_owner_cannot_request(transfer):
    with pytest.raises(PreconditionViolation, match="already owns"):
        transfer.request_transfer("asn_099", "u2")


def test_unowned_cannot_be_requested(transfer):
    with pytest.raises(PreconditionViolation, match="no owner"):
        transfer.request_transfer("asn_001", "u1")


def test_second_request_rejected(transfer):
    transfer.request_transfer("asn_099", "u1")
    with pytest.raises(PreconditionViolation, match="pending"):
        transfer.request_transfer("asn_099", "u3")


def test_owner_approves(transfer):
    transfer.request_transfer("asn_099", "u1")
    a = transfer.resolve_transfer_request("asn_099", True, "u2")
    assert a.owner_id == "u1"
    assert a.hub_id == "h1"
    assert a.transfer_request is None
    assert a.audit_trail[-1].action == "TRANSFER_APPROVED"


def test_ops_rejects(transfer):
    transfer.request_transfer("asn_099", "u1")
    a = transfer.resolve_transfer_request("asn_099", False, "ops1")
    assert a.owner_id == "u2"
    assert a.transfer_request is None
    assert a.audit_trail[-1].action == "TRANSFER_REJECTED"


def test_unrelated_user_cannot_resolve(transfer):
    transfer.request_transfer("asn_099", "u1")
    with pytest.raises(PreconditionViolation):
        transfer.resolve_transfer_request("asn_099", True, "u3")


def test_resolve_without_request(transfer):
    with pytest.raises(PreconditionViolation, match="no pending"):
        transfer.resolve_transfer_request("asn_099", True, "u2")


def test_unknown_requester(transfer):
    with pytest.raises(NotFoundError):
        transfer.request_transfer("asn_099", "ghost")
