"""
Sandbox lifecycle wiring.

SandboxManager owns the two event subscriptions (users created -> provision,
users deleted -> reclaim) and the one-time retroactive backfill. It is
created and started by the application at startup and stopped at shutdown.
"""

import logging
from typing import List, Sequence

from events.bus import Subscription, UserEventBus, UserEventType
from models.user import User
from services.sandbox_backfill import SandboxBackfill
from services.sandbox_provisioner import SandboxProvisioner
from services.sandbox_reclaimer import SandboxReclaimer
from services.sandbox_results import SandboxOutcome
from services.sandbox_store import EntityStore

logger = logging.getLogger(__name__)


class SandboxManager:
    """
    Connects the sandbox lifecycle to the user event bus.

    Args:
        bus: Event bus delivering users-created / users-deleted
        store: Entity store shared by provisioner, reclaimer and backfill
        retroactive: Run the backfill once when started
        clear_user_link: Drop ``custom.sandbox`` from users after a reclaim
    """

    def __init__(
        self,
        bus: UserEventBus,
        store: EntityStore,
        retroactive: bool = False,
        clear_user_link: bool = True,
    ):
        self.bus = bus
        self.store = store
        self.retroactive = retroactive
        self.provisioner = SandboxProvisioner(store)
        self.reclaimer = SandboxReclaimer(store, clear_user_link=clear_user_link)
        self.backfill = SandboxBackfill(store, self.provisioner)

        self._subscriptions: List[Subscription] = []
        self._backfilled = False

    @property
    def started(self) -> bool:
        return bool(self._subscriptions)

    async def start(self) -> List[SandboxOutcome]:
        """
        Register the listeners and run the backfill if enabled.

        Idempotent: a second call neither re-registers nor re-runs the backfill.

        Returns:
            Backfill outcomes (empty when the backfill did not run)
        """
        if not self._subscriptions:
            self._subscriptions = [
                self.bus.subscribe(UserEventType.USERS_CREATED, self.on_users_created),
                self.bus.subscribe(UserEventType.USERS_DELETED, self.on_users_deleted),
            ]
            logger.info("Sandbox: listening for user lifecycle events.")

        if not self.retroactive or self._backfilled:
            return []

        self._backfilled = True
        return await self.backfill.run()

    def stop(self) -> None:
        """Remove both listeners from the bus."""
        for subscription in self._subscriptions:
            self.bus.unsubscribe(subscription)
        self._subscriptions = []

    async def on_users_created(self, users: Sequence[User]) -> List[SandboxOutcome]:
        return await self.provisioner.provision(users)

    async def on_users_deleted(self, users: Sequence[User]) -> List[SandboxOutcome]:
        return await self.reclaimer.reclaim(users)
