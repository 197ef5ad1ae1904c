"""Retroactive sandbox creation for users that predate the sandbox lifecycle."""

import logging
from typing import List

from services.sandbox_provisioner import SandboxProvisioner
from services.sandbox_results import SandboxOutcome
from services.sandbox_store import EntityStore

logger = logging.getLogger(__name__)


class SandboxBackfill:
    """Provisions sandboxes for every stored user that lacks one."""

    def __init__(self, store: EntityStore, provisioner: SandboxProvisioner):
        self.store = store
        self.provisioner = provisioner

    async def run(self) -> List[SandboxOutcome]:
        """
        Find users without a ``sandbox`` entry and provision them.

        Running it again after a fully successful run finds nobody and
        creates nothing.

        Returns:
            Outcomes from the provisioner (empty if the lookup failed)
        """
        try:
            users = await self.store.find_users_without_sandbox()
        except Exception as e:
            logger.warning(f"Sandbox: could not look up users without a sandbox org: {e}")
            return []

        logger.info(f"Sandbox: backfilling sandbox orgs for {len(users)} user(s).")
        if not users:
            return []
        return await self.provisioner.provision(users)
