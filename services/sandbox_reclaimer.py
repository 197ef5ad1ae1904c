"""
Sandbox reclaiming.

Deletes a user's sandbox organization together with every project and
element scoped under it.
"""

import asyncio
import logging
from typing import List, Sequence

from models.user import User
from services.sandbox_results import SandboxOutcome, SandboxStatus
from services.sandbox_store import EntityStore

logger = logging.getLogger(__name__)


class SandboxReclaimer:
    """
    Removes sandbox organizations and cascades to their projects/elements.

    Users are processed concurrently and independently. For a single user the
    steps run strictly in order:

    1. delete the organization matching id, creator and sandbox marker
    2. capture the ids of the organization's projects
    3. delete those projects
    4. delete the elements of the captured project ids

    The cascade only starts once exactly one organization was removed. There
    is no cross-collection transaction: if step 3 or 4 fails the organization
    stays deleted and the remaining projects/elements are reported as a
    CASCADE_FAILED outcome.
    """

    def __init__(self, store: EntityStore, clear_user_link: bool = True):
        self.store = store
        self.clear_user_link = clear_user_link

    async def reclaim(self, users: Sequence[User]) -> List[SandboxOutcome]:
        """
        Reclaim the sandbox of every user in ``users``.

        Args:
            users: User records from a "users deleted" event

        Returns:
            One SandboxOutcome per input user, in input order
        """
        return list(await asyncio.gather(*(self._reclaim_user(user) for user in users)))

    async def _reclaim_user(self, user: User) -> SandboxOutcome:
        username = user.username
        sandbox_id = (user.custom or {}).get("sandbox")
        if not sandbox_id:
            logger.warning(f"Sandbox: {username} has no sandbox org to delete.")
            return SandboxOutcome(username=username, status=SandboxStatus.NO_SANDBOX)

        try:
            removed = await self.store.delete_sandbox_organization(sandbox_id, username)
        except Exception as e:
            logger.warning(f"Sandbox: {username}'s sandbox org was not deleted: {e}")
            return SandboxOutcome(
                username=username,
                status=SandboxStatus.RECLAIM_FAILED,
                sandbox_id=sandbox_id,
                error=str(e),
            )

        if removed != 1:
            # Already gone, or the org is not a sandbox owned by this user
            logger.warning(f"Sandbox: {username}'s sandbox org was not deleted (removed {removed}).")
            return SandboxOutcome(
                username=username,
                status=SandboxStatus.NOT_FOUND,
                sandbox_id=sandbox_id,
                error=f"expected 1 sandbox org removed, got {removed}",
            )

        try:
            project_ids = await self.store.find_project_ids(sandbox_id)
            projects_removed = await self.store.delete_projects(sandbox_id)
            # Use the captured ids, the projects can no longer be queried
            elements_removed = await self.store.delete_elements(project_ids)
        except Exception as e:
            logger.warning(f"Sandbox: {username}'s sandbox org was deleted but its contents were not: {e}")
            return SandboxOutcome(
                username=username,
                status=SandboxStatus.CASCADE_FAILED,
                sandbox_id=sandbox_id,
                error=str(e),
            )

        if self.clear_user_link:
            await self._unlink(user)

        logger.info(f"Sandbox: {username}'s sandbox org was deleted.")
        return SandboxOutcome(
            username=username,
            status=SandboxStatus.RECLAIMED,
            sandbox_id=sandbox_id,
            projects_removed=projects_removed,
            elements_removed=elements_removed,
        )

    async def _unlink(self, user: User) -> None:
        """Drop the sandbox reference from the user, in memory and in storage if still present."""
        custom = {k: v for k, v in (user.custom or {}).items() if k != "sandbox"}
        user.custom = custom
        try:
            updated = await self.store.update_user_custom(user.username, custom)
        except Exception as e:
            logger.warning(f"Sandbox: could not clear {user.username}'s sandbox reference: {e}")
            return
        if not updated:
            logger.debug(f"Sandbox: {user.username} no longer exists, nothing to unlink.")
