"""Unit tests for AccessGate — role separation and denial behaviour."""

from __future__ import annotations

import pytest

from relaygate.core.gate import AccessGate
from relaygate.core.registry import ApprovalRegistry
from relaygate.errors import AuthorizationError
from relaygate.models.access import Action


class TestAccessGate:
    def test_anyone_can_bootstrap(self, gate: AccessGate):
        assert gate.can_bootstrap("999")
        assert gate.is_permitted(Action.BOOTSTRAP, "999")

    @pytest.mark.parametrize("identity", ["1", "999", "10000", "-1000", "admin", 1001])
    def test_only_admin_mutates_registry(self, gate: AccessGate, identity):
        assert gate.can_mutate_registry(identity) is False

    def test_admin_mutates_registry_in_either_form(self, gate: AccessGate, admin_id: str):
        assert gate.can_mutate_registry(admin_id)
        assert gate.can_mutate_registry(int(admin_id))

    def test_no_admin_configured_denies_everyone(self, registry: ApprovalRegistry):
        gate = AccessGate(registry, "")
        assert gate.can_mutate_registry("") is False
        assert gate.can_mutate_registry("1000") is False

    def test_upload_and_dispatch_track_registry(self, gate: AccessGate, registry: ApprovalRegistry):
        for identity in ("42", "43"):
            assert gate.can_upload(identity) == gate.can_dispatch(identity) == registry.is_approved(identity)
        registry.approve("42")
        for identity in ("42", "43"):
            assert gate.can_upload(identity) == gate.can_dispatch(identity) == registry.is_approved(identity)
        assert gate.can_upload("42")
        assert not gate.can_dispatch("43")

    def test_admin_must_be_approved_to_send(self, gate: AccessGate, registry: ApprovalRegistry, admin_id: str):
        assert gate.can_mutate_registry(admin_id)
        assert not gate.can_upload(admin_id)
        assert not gate.can_dispatch(admin_id)
        registry.approve(admin_id)
        assert gate.can_dispatch(admin_id)

    def test_require_raises_with_user_message(self, gate: AccessGate):
        with pytest.raises(AuthorizationError) as excinfo:
            gate.require(Action.UPLOAD, "42")
        assert excinfo.value.user_message == "You are not authorized to upload files."

    def test_require_passes_when_permitted(self, gate: AccessGate, registry: ApprovalRegistry):
        registry.approve("42")
        gate.require(Action.DISPATCH, "42")
