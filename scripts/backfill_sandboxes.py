"""Create sandbox organizations for every user that does not have one.

Runs the same backfill the API performs at startup when
SANDBOX_RETROACTIVE=true, on demand. Useful after failed provisioning left
users without a sandbox.

Usage:
  python scripts/backfill_sandboxes.py
  python scripts/backfill_sandboxes.py --dry-run
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse
import asyncio
import logging

from services.sandbox_backfill import SandboxBackfill
from services.sandbox_provisioner import SandboxProvisioner
from services.sandbox_results import summarize_outcomes
from services.sandbox_store import SQLModelEntityStore
from utils.database import init_db


async def run(dry_run: bool = False) -> bool:
    store = SQLModelEntityStore(init_db())

    if dry_run:
        users = await store.find_users_without_sandbox()
        print(f"{len(users)} user(s) without a sandbox org:")
        for user in users:
            print(f"  - {user.username}")
        return True

    outcomes = await SandboxBackfill(store, SandboxProvisioner(store)).run()
    for outcome in outcomes:
        line = f"  {outcome.username}: {outcome.status.value}"
        if outcome.sandbox_id:
            line += f" ({outcome.sandbox_id})"
        if outcome.error:
            line += f" - {outcome.error}"
        print(line)
    print(f"Summary: {summarize_outcomes(outcomes) or 'nothing to do'}")
    return all(outcome.ok for outcome in outcomes)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Backfill sandbox organizations")
    parser.add_argument("--dry-run", action="store_true", help="Only list users that would get a sandbox")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    ok = asyncio.run(run(dry_run=args.dry_run))
    sys.exit(0 if ok else 1)
