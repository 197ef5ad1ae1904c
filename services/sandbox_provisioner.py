"""
Sandbox provisioning.

Creates one private "Sandbox (<username>)" organization per new user and
links it from the user's custom data.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from models.organization import Organization
from models.user import User
from services.sandbox_results import SandboxOutcome, SandboxStatus
from services.sandbox_store import EntityStore
from utils.clock import utc_now

logger = logging.getLogger(__name__)

OWNER_PERMISSIONS = ["read", "write", "admin"]


def sandbox_name(username: str) -> str:
    return f"Sandbox ({username})"


def build_sandbox_organization(username: str, org_id: str, now: datetime) -> Organization:
    """Build (without saving) the sandbox organization owned by ``username``."""
    return Organization(
        id=org_id,
        name=sandbox_name(username),
        permissions={username: list(OWNER_PERMISSIONS)},
        created_by=username,
        last_modified_by=username,
        created_at=now,
        updated_at=now,
        custom={"sandbox": True},
    )


class SandboxProvisioner:
    """
    Creates sandbox organizations for batches of users.

    The organizations of one batch are inserted with a single atomic store
    call. Users are then linked concurrently, and one user's failed link
    does not affect the others.
    """

    def __init__(
        self,
        store: EntityStore,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))
        self._now = clock or utc_now

    async def provision(self, users: Sequence[User]) -> List[SandboxOutcome]:
        """
        Provision a sandbox for every user in ``users``.

        Users whose custom data already names a sandbox are skipped. For the
        rest, the new organization id is staged into ``user.custom["sandbox"]``
        before the batch insert so the later user update writes the same id.

        Args:
            users: User records from a "users created" event or the backfill

        Returns:
            One SandboxOutcome per input user, in input order
        """
        outcomes: List[Optional[SandboxOutcome]] = [None] * len(users)
        staged = []  # (position, user, org, previous custom)

        for position, user in enumerate(users):
            existing = (user.custom or {}).get("sandbox")
            if existing:
                logger.info(f"Sandbox: {user.username} already has sandbox org {existing}, skipping.")
                outcomes[position] = SandboxOutcome(
                    username=user.username,
                    status=SandboxStatus.ALREADY_PROVISIONED,
                    sandbox_id=existing,
                )
                continue

            org = build_sandbox_organization(user.username, self._new_id(), self._now())
            previous = dict(user.custom or {})
            user.custom = {**previous, "sandbox": org.id}
            staged.append((position, user, org, previous))

        if not staged:
            return list(outcomes)

        try:
            await self.store.insert_organizations([org for _, _, org, _ in staged])
        except Exception as e:
            logger.warning(f"Sandbox: failed to create {len(staged)} sandbox org(s): {e}")
            for position, user, org, previous in staged:
                # Nothing was inserted, so drop the staged link
                user.custom = previous
                outcomes[position] = SandboxOutcome(
                    username=user.username,
                    status=SandboxStatus.BATCH_FAILED,
                    error=str(e),
                )
            return list(outcomes)

        linked = await asyncio.gather(*(self._link(user, org) for _, user, org, _ in staged))
        for (position, _, _, _), outcome in zip(staged, linked):
            outcomes[position] = outcome
        return list(outcomes)

    async def _link(self, user: User, org: Organization) -> SandboxOutcome:
        """Persist the user's custom data holding the new sandbox id."""
        try:
            updated = await self.store.update_user_custom(user.username, user.custom)
        except Exception as e:
            logger.warning(f"Sandbox: {user.username}'s sandbox org {org.id} was created but not linked: {e}")
            return SandboxOutcome(
                username=user.username,
                status=SandboxStatus.LINK_FAILED,
                sandbox_id=org.id,
                error=str(e),
            )

        if not updated:
            logger.warning(f"Sandbox: {user.username}'s sandbox org {org.id} was created but the user no longer exists.")
            return SandboxOutcome(
                username=user.username,
                status=SandboxStatus.LINK_FAILED,
                sandbox_id=org.id,
                error="user not found",
            )

        logger.info(f"Sandbox: {user.username}'s sandbox org was created.")
        return SandboxOutcome(
            username=user.username,
            status=SandboxStatus.PROVISIONED,
            sandbox_id=org.id,
        )
