"""
Unit tests for SandboxReclaimer.

Run: pytest tests/unit/test_sandbox_reclaimer.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import asyncio
from datetime import datetime, timezone

import pytest

from fake_store import InMemoryEntityStore
from models.organization import Organization
from services.sandbox_provisioner import build_sandbox_organization
from services.sandbox_reclaimer import SandboxReclaimer
from services.sandbox_results import SandboxStatus

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _with_sandbox(store, username, org_id):
    """Store a sandbox org for ``username`` and return the linked user."""
    store.orgs[org_id] = build_sandbox_organization(username, org_id, NOW)
    return store.add_user(username, sandbox=org_id)


@pytest.fixture
def store():
    return InMemoryEntityStore()


class TestReclaim:

    def test_removes_org_projects_and_elements(self, store):
        alice = _with_sandbox(store, "alice", "org-a")
        p1 = store.add_project("org-a")
        p2 = store.add_project("org-a")
        store.add_element(p1.id)
        store.add_element(p1.id)
        store.add_element(p2.id)

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.RECLAIMED
        assert outcomes[0].sandbox_id == "org-a"
        assert outcomes[0].projects_removed == 2
        assert outcomes[0].elements_removed == 3
        assert store.orgs == {}
        assert store.projects == {}
        assert store.elements == {}

    def test_other_users_sandbox_is_untouched(self, store):
        alice = _with_sandbox(store, "alice", "org-a")
        _with_sandbox(store, "bob", "org-b")
        store.add_project("org-a")
        bob_project = store.add_project("org-b")
        bob_element = store.add_element(bob_project.id)

        asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert list(store.orgs) == ["org-b"]
        assert list(store.projects) == [bob_project.id]
        assert list(store.elements) == [bob_element.id]

    def test_steps_run_in_order(self, store):
        alice = _with_sandbox(store, "alice", "org-a")
        p1 = store.add_project("org-a")

        asyncio.run(SandboxReclaimer(store, clear_user_link=False).reclaim([alice]))

        assert store.calls == [
            ("delete_sandbox_organization", "org-a"),
            ("find_project_ids", "org-a"),
            ("delete_projects", "org-a"),
            ("delete_elements", [p1.id]),
        ]

    def test_elements_use_ids_captured_before_project_delete(self, store):
        alice = _with_sandbox(store, "alice", "org-a")
        p1 = store.add_project("org-a")
        store.add_element(p1.id)

        asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        operations = [op for op, _ in store.calls]
        # Exactly one project lookup, and it happens before the projects are deleted
        assert operations.count("find_project_ids") == 1
        assert operations.index("find_project_ids") < operations.index("delete_projects")
        assert ("delete_elements", [p1.id]) in store.calls

    def test_foreign_org_is_not_deleted(self, store):
        store.orgs["org-b"] = build_sandbox_organization("bob", "org-b", NOW)
        # Alice's record points at Bob's sandbox
        alice = store.add_user("alice", sandbox="org-b")
        store.add_project("org-b")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.NOT_FOUND
        assert "org-b" in store.orgs
        assert len(store.projects) == 1
        assert [op for op, _ in store.calls] == ["delete_sandbox_organization"]

    def test_non_sandbox_org_is_not_deleted(self, store):
        store.orgs["org-x"] = Organization(
            id="org-x", name="Real org", created_by="alice", last_modified_by="alice",
            custom={"sandbox": False},
        )
        alice = store.add_user("alice", sandbox="org-x")
        store.add_project("org-x")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.NOT_FOUND
        assert "org-x" in store.orgs
        assert len(store.projects) == 1

    def test_org_without_marker_is_not_deleted(self, store):
        store.orgs["org-x"] = Organization(
            id="org-x", name="Real org", created_by="alice", last_modified_by="alice",
        )
        alice = store.add_user("alice", sandbox="org-x")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.NOT_FOUND
        assert "org-x" in store.orgs

    def test_already_removed_sandbox_stops_the_cascade(self, store):
        alice = store.add_user("alice", sandbox="org-gone")
        orphan = store.add_project("org-gone")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.NOT_FOUND
        # Orphans are left for an operator rather than risking other deletions
        assert orphan.id in store.projects

    def test_user_without_sandbox(self, store):
        nobody = store.add_user("nobody")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([nobody]))

        assert outcomes[0].status == SandboxStatus.NO_SANDBOX
        assert store.calls == []

    def test_org_delete_error(self, store):
        store.fail("delete_sandbox_organization")
        alice = _with_sandbox(store, "alice", "org-a")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.RECLAIM_FAILED
        assert "delete_sandbox_organization failed" in outcomes[0].error
        assert [op for op, _ in store.calls] == ["delete_sandbox_organization"]

    def test_element_delete_failure_leaves_orphans(self, store):
        store.fail("delete_elements")
        alice = _with_sandbox(store, "alice", "org-a")
        p1 = store.add_project("org-a")
        element = store.add_element(p1.id)

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.CASCADE_FAILED
        assert store.orgs == {}
        assert store.projects == {}
        assert element.id in store.elements
        # The link is only cleared on full success
        assert store.users["alice"] == {"sandbox": "org-a"}

    def test_project_delete_failure_skips_elements(self, store):
        store.fail("delete_projects")
        alice = _with_sandbox(store, "alice", "org-a")
        store.add_project("org-a")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.CASCADE_FAILED
        assert "delete_elements" not in [op for op, _ in store.calls]

    def test_failure_for_one_user_does_not_stop_the_others(self, store):
        users = [_with_sandbox(store, name, f"org-{name}") for name in ("alice", "bob", "carol")]
        for name in ("alice", "bob", "carol"):
            store.add_element(store.add_project(f"org-{name}").id)
        store.fail("delete_sandbox_organization", when="org-bob")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim(users))

        assert [o.status for o in outcomes] == [
            SandboxStatus.RECLAIMED,
            SandboxStatus.RECLAIM_FAILED,
            SandboxStatus.RECLAIMED,
        ]
        assert list(store.orgs) == ["org-bob"]
        assert [p.org for p in store.projects.values()] == ["org-bob"]
        assert len(store.elements) == 1

    def test_empty_project_set(self, store):
        alice = _with_sandbox(store, "alice", "org-a")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.RECLAIMED
        assert outcomes[0].projects_removed == 0
        assert outcomes[0].elements_removed == 0


class TestUserLink:

    def test_link_cleared_when_user_still_exists(self, store):
        store.orgs["org-a"] = build_sandbox_organization("alice", "org-a", NOW)
        alice = store.add_user("alice", sandbox="org-a", theme="dark")

        asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert store.users["alice"] == {"theme": "dark"}
        assert alice.sandbox_id is None

    def test_deleted_user_is_not_an_error(self, store):
        alice = _with_sandbox(store, "alice", "org-a")
        del store.users["alice"]

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.RECLAIMED
        assert "alice" not in store.users

    def test_unlink_failure_keeps_reclaimed_status(self, store):
        store.fail("update_user_custom")
        alice = _with_sandbox(store, "alice", "org-a")

        outcomes = asyncio.run(SandboxReclaimer(store).reclaim([alice]))

        assert outcomes[0].status == SandboxStatus.RECLAIMED
        assert store.orgs == {}

    def test_link_kept_when_disabled(self, store):
        alice = _with_sandbox(store, "alice", "org-a")

        asyncio.run(SandboxReclaimer(store, clear_user_link=False).reclaim([alice]))

        assert store.users["alice"] == {"sandbox": "org-a"}
        assert alice.sandbox_id == "org-a"
