"""
Main entry point for the sandbox lifecycle demo.

Creates two users, lets the sandbox manager provision their sandbox orgs,
adds a project with an element to one sandbox, then deletes that user and
shows the cascade.
"""

import asyncio
import logging
import os
import tempfile

from sqlmodel import Session, select

from events.bus import UserEventBus
from models.element import Element
from models.organization import Organization
from models.project import Project
from models.user import User
from services.sandbox_manager import SandboxManager
from services.sandbox_results import summarize_outcomes
from services.sandbox_store import SQLModelEntityStore
from services.user_service import UserService
from utils.database import build_engine, init_db


async def main():
    print("=" * 80)
    print("Sandbox lifecycle demo")
    print("=" * 80)
    print()

    # Throwaway database in a temporary directory
    workdir = tempfile.mkdtemp(prefix="sandbox-demo-")
    engine = init_db(build_engine(f"sqlite:///{os.path.join(workdir, 'demo.db')}"))
    bus = UserEventBus()
    manager = SandboxManager(bus=bus, store=SQLModelEntityStore(engine))
    await manager.start()
    users = UserService(engine, bus)

    created = await users.create_users([User(username="alice"), User(username="bob")])
    for outcomes in created.results:
        print(f"users-created: {summarize_outcomes(outcomes)}")
        for outcome in outcomes:
            print(f"  {outcome.username} -> {outcome.sandbox_id}")

    alice_sandbox = created.results[0][0].sandbox_id
    with Session(engine) as db:
        project = Project(name="Demo project", org=alice_sandbox)
        db.add(project)
        db.commit()
        db.refresh(project)
        db.add(Element(name="Demo element", project=project.id))
        db.commit()

    deleted = await users.delete_users(["alice"])
    for outcomes in deleted.results:
        print(f"users-deleted: {summarize_outcomes(outcomes)}")
        for outcome in outcomes:
            print(f"  {outcome.username}: {outcome.projects_removed} project(s), "
                  f"{outcome.elements_removed} element(s) removed")

    with Session(engine) as db:
        remaining = db.exec(select(Organization)).all()
        print(f"Remaining organizations: {[org.name for org in remaining]}")

    manager.stop()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
