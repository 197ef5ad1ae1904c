"""
Unit tests for SandboxProvisioner.

Run: pytest tests/unit/test_sandbox_provisioner.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import asyncio
from datetime import datetime, timezone

from fake_store import InMemoryEntityStore
from services.sandbox_provisioner import SandboxProvisioner, build_sandbox_organization
from services.sandbox_results import SandboxStatus

FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _sequential_ids():
    counter = iter(range(1, 1000))
    return lambda: f"org-{next(counter)}"


def _provisioner(store):
    return SandboxProvisioner(store, id_factory=_sequential_ids(), clock=lambda: FIXED_NOW)


class TestBuildSandboxOrganization:

    def test_fields(self):
        org = build_sandbox_organization("alice", "org-1", FIXED_NOW)
        assert org.id == "org-1"
        assert org.name == "Sandbox (alice)"
        assert org.permissions == {"alice": ["read", "write", "admin"]}
        assert org.created_by == "alice"
        assert org.last_modified_by == "alice"
        assert org.created_at == FIXED_NOW
        assert org.updated_at == FIXED_NOW
        assert org.custom == {"sandbox": True}
        assert org.is_sandbox


class TestProvision:

    def test_two_users_get_their_own_sandbox(self):
        store = InMemoryEntityStore()
        alice = store.add_user("alice")
        bob = store.add_user("bob")

        outcomes = asyncio.run(_provisioner(store).provision([alice, bob]))

        assert [o.status for o in outcomes] == [SandboxStatus.PROVISIONED, SandboxStatus.PROVISIONED]
        assert [o.sandbox_id for o in outcomes] == ["org-1", "org-2"]
        assert store.orgs["org-1"].name == "Sandbox (alice)"
        assert store.orgs["org-2"].name == "Sandbox (bob)"
        assert store.orgs["org-2"].permissions == {"bob": ["read", "write", "admin"]}
        # Stored and in-memory users both point at their sandbox
        assert store.users["alice"]["sandbox"] == "org-1"
        assert store.users["bob"]["sandbox"] == "org-2"
        assert alice.custom["sandbox"] == "org-1"
        assert bob.sandbox_id == "org-2"

    def test_exactly_one_sandbox_per_user(self):
        store = InMemoryEntityStore()
        alice = store.add_user("alice")

        asyncio.run(_provisioner(store).provision([alice]))

        assert len(store.sandboxes_of("alice")) == 1

    def test_batch_is_inserted_once_before_any_user_update(self):
        store = InMemoryEntityStore()
        users = [store.add_user(name) for name in ("alice", "bob", "carol")]

        asyncio.run(_provisioner(store).provision(users))

        operations = [op for op, _ in store.calls]
        assert operations[0] == "insert_organizations"
        assert operations.count("insert_organizations") == 1
        assert operations[1:] == ["update_user_custom"] * 3
        assert store.calls[0][1] == ["org-1", "org-2", "org-3"]

    def test_existing_custom_data_is_kept(self):
        store = InMemoryEntityStore()
        alice = store.add_user("alice", theme="dark")

        asyncio.run(_provisioner(store).provision([alice]))

        assert store.users["alice"] == {"theme": "dark", "sandbox": "org-1"}

    def test_batch_failure_creates_nothing_and_updates_nobody(self):
        store = InMemoryEntityStore()
        store.fail("insert_organizations")
        alice = store.add_user("alice")
        bob = store.add_user("bob", theme="dark")

        outcomes = asyncio.run(_provisioner(store).provision([alice, bob]))

        assert [o.status for o in outcomes] == [SandboxStatus.BATCH_FAILED] * 2
        assert all("insert_organizations failed" in o.error for o in outcomes)
        assert store.orgs == {}
        assert "update_user_custom" not in [op for op, _ in store.calls]
        # Staged ids are rolled back
        assert alice.custom == {}
        assert bob.custom == {"theme": "dark"}

    def test_one_failed_update_does_not_affect_the_others(self):
        store = InMemoryEntityStore()
        store.fail("update_user_custom", when="bob")
        users = [store.add_user(name) for name in ("alice", "bob", "carol")]

        outcomes = asyncio.run(_provisioner(store).provision(users))

        by_user = {o.username: o for o in outcomes}
        assert by_user["alice"].status == SandboxStatus.PROVISIONED
        assert by_user["carol"].status == SandboxStatus.PROVISIONED
        assert by_user["bob"].status == SandboxStatus.LINK_FAILED
        assert by_user["bob"].sandbox_id == "org-2"
        # Bob's org exists but his stored record is not linked
        assert "org-2" in store.orgs
        assert "sandbox" not in store.users["bob"]
        assert store.users["alice"]["sandbox"] == "org-1"
        assert store.users["carol"]["sandbox"] == "org-3"

    def test_missing_user_is_a_link_failure(self):
        store = InMemoryEntityStore()
        ghost = store.add_user("ghost")
        del store.users["ghost"]

        outcomes = asyncio.run(_provisioner(store).provision([ghost]))

        assert outcomes[0].status == SandboxStatus.LINK_FAILED
        assert outcomes[0].error == "user not found"

    def test_already_provisioned_user_is_skipped(self):
        store = InMemoryEntityStore()
        alice = store.add_user("alice", sandbox="existing-org")
        bob = store.add_user("bob")

        outcomes = asyncio.run(_provisioner(store).provision([alice, bob]))

        assert outcomes[0].status == SandboxStatus.ALREADY_PROVISIONED
        assert outcomes[0].sandbox_id == "existing-org"
        assert outcomes[1].status == SandboxStatus.PROVISIONED
        assert store.calls[0] == ("insert_organizations", ["org-1"])
        assert store.sandboxes_of("alice") == []

    def test_redelivered_event_does_not_create_a_second_sandbox(self):
        store = InMemoryEntityStore()
        alice = store.add_user("alice")
        provisioner = _provisioner(store)

        asyncio.run(provisioner.provision([alice]))
        outcomes = asyncio.run(provisioner.provision([alice]))

        assert outcomes[0].status == SandboxStatus.ALREADY_PROVISIONED
        assert len(store.sandboxes_of("alice")) == 1

    def test_all_skipped_makes_no_store_calls(self):
        store = InMemoryEntityStore()
        alice = store.add_user("alice", sandbox="org-x")

        outcomes = asyncio.run(_provisioner(store).provision([alice]))

        assert outcomes[0].status == SandboxStatus.ALREADY_PROVISIONED
        assert store.calls == []

    def test_empty_batch(self):
        store = InMemoryEntityStore()
        assert asyncio.run(_provisioner(store).provision([])) == []
        assert store.calls == []

    def test_default_ids_are_unique(self):
        store = InMemoryEntityStore()
        users = [store.add_user(f"user{i}") for i in range(5)]

        outcomes = asyncio.run(SandboxProvisioner(store).provision(users))

        ids = {o.sandbox_id for o in outcomes}
        assert len(ids) == 5
