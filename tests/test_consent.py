import pytest

from kyc_ledger.consent import grant_access, request_access, revoke_access
from kyc_ledger.errors import NotFoundError


def test_request_is_idempotent(alice):
    p = request_access("bob", alice, "dob")
    p = request_access("bob", p, "dob")
    assert p.entry("dob").visibility_requests == ["bob"]
    assert p.entry("address").visibility_requests == []


def test_grant_clears_pending_request(alice):
    p = grant_access(request_access("bob", alice, "dob"), "bob", "dob")
    assert p.entry("dob").visibility_list == ["bob"]
    assert p.entry("dob").visibility_requests == []


def test_grant_is_idempotent(alice):
    p = grant_access(alice, "bob", "dob")
    p = grant_access(p, "bob", "dob")
    assert p.entry("dob").visibility_list == ["bob"]
    assert "bob" not in p.entry("dob").visibility_requests


def test_grant_leaves_other_requests(alice):
    p = request_access("carol", request_access("bob", alice, "dob"), "dob")
    p = grant_access(p, "bob", "dob")
    assert p.entry("dob").visibility_requests == ["carol"]


def test_revoke_does_not_reinstate_request(alice):
    p = grant_access(request_access("bob", alice, "dob"), "bob", "dob")
    p = revoke_access(p, "bob", "dob")
    assert p.entry("dob").visibility_list == []
    assert p.entry("dob").visibility_requests == []


def test_revoke_leaves_requests_untouched(alice):
    p = request_access("carol", grant_access(alice, "bob", "dob"), "dob")
    p = revoke_access(p, "bob", "dob")
    assert p.entry("dob").visibility_requests == ["carol"]


def test_request_after_grant_is_ignored(alice):
    p = request_access("bob", grant_access(alice, "bob", "dob"), "dob")
    assert p.entry("dob").visibility_list == ["bob"]
    assert p.entry("dob").visibility_requests == []


@pytest.mark.parametrize("op", [
    lambda p: request_access("bob", p, "passport"),
    lambda p: grant_access(p, "bob", "passport"),
    lambda p: revoke_access(p, "bob", "passport"),
])
def test_unknown_key(alice, op):
    with pytest.raises(NotFoundError):
        op(alice)


def test_owner_not_mutated(alice):
    grant_access(alice, "bob", "dob")
    assert alice.entry("dob").visibility_list == []
