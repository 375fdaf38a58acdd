"""Tests for stellara_ledger/integration/collaborators.py: auth, tokens, hooks."""

import logging

import pytest

from stellara_ledger.config import LedgerConfig
from stellara_ledger.core.errors import (
    ArithmeticOverflow,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    Unauthorized,
)
from stellara_ledger.core.fixed_point import I128_MAX
from stellara_ledger.integration import AllowAll, EventLog, HookPolicy, Host, SignerSet, StoreToken


def _host(**kwargs):
    host = Host(**kwargs)
    token = host.register_token(StoreToken(host, "RWD"))
    return host, token


# ---------------------------------------------------------------------------
# Authorizers
# ---------------------------------------------------------------------------

class TestAuthorizers:
    def test_allow_all(self):
        AllowAll().require_auth("anyone")
        with pytest.raises(Unauthorized):
            AllowAll().require_auth("")

    def test_signer_set(self):
        signers = SignerSet(["alice"])
        signers.require_auth("alice")
        with pytest.raises(Unauthorized):
            signers.require_auth("bob")

    def test_signed_by_restores(self):
        signers = SignerSet(["alice"])
        with signers.signed_by("bob"):
            signers.require_auth("bob")
            with pytest.raises(Unauthorized):
                signers.require_auth("alice")
        signers.require_auth("alice")

    def test_add_clear(self):
        signers = SignerSet()
        signers.add("a", "b")
        signers.require_auth("b")
        signers.clear()
        with pytest.raises(Unauthorized):
            signers.require_auth("a")


# ---------------------------------------------------------------------------
# StoreToken
# ---------------------------------------------------------------------------

class TestStoreToken:
    def test_mint_and_transfer(self):
        host, tok = _host()
        tok.mint("alice", 100)
        tok.transfer("alice", "bob", 30)
        assert tok.balance("alice") == 70
        assert tok.balance("bob") == 30
        assert tok.total_supply() == 100

    def test_insufficient_balance(self):
        host, tok = _host()
        tok.mint("alice", 10)
        with pytest.raises(InsufficientBalance):
            tok.transfer("alice", "bob", 11)
        assert tok.balance("alice") == 10
        assert tok.balance("bob") == 0

    def test_negative_amount(self):
        host, tok = _host()
        with pytest.raises(InvalidAmount):
            tok.transfer("alice", "bob", -1)
        with pytest.raises(InvalidAmount):
            tok.mint("alice", -1)

    def test_mint_overflow(self):
        host, tok = _host()
        tok.mint("alice", I128_MAX)
        with pytest.raises(ArithmeticOverflow):
            tok.mint("bob", 1)

    def test_zero_balances_pruned(self):
        host, tok = _host()
        tok.mint("alice", 5)
        tok.transfer("alice", "bob", 5)
        assert not host.base_store.has(("balance", "RWD", "alice"))

    def test_admin_mint_requires_auth(self):
        host = Host(auth=SignerSet())
        tok = host.register_token(StoreToken(host, "GOV", admin="treasury"))
        with pytest.raises(Unauthorized):
            tok.mint("alice", 1)
        with host.auth.signed_by("treasury"):
            tok.mint("alice", 1)
        assert tok.balance("alice") == 1

    def test_transfer_rolls_back_with_outer_block(self):
        host, tok = _host()
        tok.mint("alice", 10)
        with pytest.raises(InvalidAmount):
            with host.atomic():
                tok.transfer("alice", "bob", 10)
                raise InvalidAmount("abort")
        assert tok.balance("alice") == 10

    def test_events(self):
        log = EventLog()
        host, tok = _host(events=log)
        tok.mint("alice", 10)
        tok.transfer("alice", "bob", 4)
        assert log.topics() == ["mint", "transfer"]
        assert log.of("transfer")[0] == {"token": "RWD", "from": "alice", "to": "bob", "amount": 4}


class TestAllowance:
    def test_transfer_from(self):
        host, tok = _host()
        tok.mint("alice", 10)
        tok.approve("alice", "bob", 6)
        tok.transfer_from("bob", "alice", "carol", 4)
        assert tok.allowance("alice", "bob") == 2
        assert tok.balance("carol") == 4

    def test_exceeds_allowance(self):
        host, tok = _host()
        tok.mint("alice", 10)
        tok.approve("alice", "bob", 3)
        with pytest.raises(InsufficientAllowance):
            tok.transfer_from("bob", "alice", "bob", 4)
        assert tok.allowance("alice", "bob") == 3

    def test_allowance_restored_when_balance_short(self):
        host, tok = _host()
        tok.mint("alice", 1)
        tok.approve("alice", "bob", 5)
        with pytest.raises(InsufficientBalance):
            tok.transfer_from("bob", "alice", "bob", 5)
        assert tok.allowance("alice", "bob") == 5

    def test_approve_requires_owner(self):
        host = Host(auth=SignerSet(["bob"]))
        tok = host.register_token(StoreToken(host, "RWD"))
        with pytest.raises(Unauthorized):
            tok.approve("alice", "bob", 1)


# ---------------------------------------------------------------------------
# Transfer hooks
# ---------------------------------------------------------------------------

class TestTransferHooks:
    def test_hook_sees_credit(self):
        host, tok = _host()
        seen = []
        tok.register_hook("bob", lambda token_id, sender, amount: seen.append((token_id, sender, amount)))
        tok.mint("alice", 5)
        tok.transfer("alice", "bob", 5)
        assert seen == [("RWD", "alice", 5)]

    def test_best_effort_failure_swallowed(self, caplog):
        host, tok = _host()
        tok.mint("alice", 5)

        def hook(token_id, sender, amount):
            host.store.set(("hook", "side_effect"), True)
            raise RuntimeError("hook failed")

        tok.register_hook("bob", hook, HookPolicy.BEST_EFFORT)
        with caplog.at_level(logging.WARNING, logger="stellara_ledger.integration.collaborators"):
            tok.transfer("alice", "bob", 5)
        assert tok.balance("bob") == 5
        assert not host.base_store.has(("hook", "side_effect"))
        assert "Transfer hook for bob" in caplog.text

    def test_abort_failure_propagates(self):
        host, tok = _host()
        tok.mint("alice", 5)

        def hook(token_id, sender, amount):
            raise RuntimeError("hook failed")

        tok.register_hook("bob", hook, HookPolicy.ABORT)
        with pytest.raises(RuntimeError):
            tok.transfer("alice", "bob", 5)
        assert tok.balance("alice") == 5
        assert tok.balance("bob") == 0

    def test_default_policy_from_config(self):
        host, tok = _host(config=LedgerConfig(hook_policy="abort"))
        tok.register_hook("bob", lambda *a: None)
        assert tok._hooks["bob"].policy is HookPolicy.ABORT

    def test_unregister(self):
        host, tok = _host()
        seen = []
        tok.register_hook("bob", lambda *a: seen.append(a))
        tok.unregister_hook("bob")
        tok.mint("alice", 1)
        tok.transfer("alice", "bob", 1)
        assert seen == []
