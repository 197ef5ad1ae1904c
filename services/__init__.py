"""
Services module - Business Logic Layer.

Contains the sandbox lifecycle services, sitting between the event bus / API
layer and the data layer (repositories).

Services handle:
- Provisioning a sandbox organization per new user
- Reclaiming a deleted user's sandbox and everything scoped under it
- The one-time retroactive backfill
- Wiring those to the user lifecycle events

Usage:
    from services import SandboxManager, SQLModelEntityStore

    manager = SandboxManager(bus, SQLModelEntityStore(engine), retroactive=True)
    await manager.start()
"""

from services.sandbox_backfill import SandboxBackfill
from services.sandbox_manager import SandboxManager
from services.sandbox_provisioner import SandboxProvisioner
from services.sandbox_reclaimer import SandboxReclaimer
from services.sandbox_results import SandboxOutcome, SandboxStatus, summarize_outcomes
from services.sandbox_store import EntityStore, SQLModelEntityStore
from services.user_service import UserService

__all__ = [
    "SandboxBackfill",
    "SandboxManager",
    "SandboxProvisioner",
    "SandboxReclaimer",
    "SandboxOutcome",
    "SandboxStatus",
    "summarize_outcomes",
    "EntityStore",
    "SQLModelEntityStore",
    "UserService",
]
