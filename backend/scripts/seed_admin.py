"""
YDA Portal - Seed Admin Script
==============================
Creates the first SUPERADMIN account and, optionally, a little demo content.

Sign-up never grants a role, so the first administrator has to be created
here. Later roles are granted from the admin API.

Usage:
    python -m scripts.seed_admin --email admin@yda-yemen.org --password '...'
    python -m scripts.seed_admin --email admin@yda-yemen.org --password '...' --demo
"""

import argparse
import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone

# Add parent dir to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select  # noqa: E402

from yda_portal.console.forms import ContentForm  # noqa: E402
from yda_portal.core.database import async_session, init_db  # noqa: E402
from yda_portal.core.security import hash_password  # noqa: E402
from yda_portal.models.user import AppRole, User, UserRoleAssignment  # noqa: E402
from yda_portal.schemas.content import EventCreate, KpiCreate, ProgramCreate  # noqa: E402
from yda_portal.services.content_store import TABLES, Actor, ContentConflict, content_store  # noqa: E402


DEMO_PROGRAMS = [
    {
        "title": {"ar": "التثقيف الصحي", "en": "Health Education"},
        "summary": {"ar": "جلسات توعية حول السكري", "en": "Diabetes awareness sessions"},
        "icon": "book-open",
        "status": "published",
    },
    {
        "title": {"ar": "مخيمات الأطفال", "en": "Children's Camps"},
        "summary": {"ar": "مخيمات صيفية للأطفال المصابين بالسكري", "en": "Summer camps for children with diabetes"},
        "icon": "tent",
        "status": "published",
    },
]

DEMO_KPIS = [
    {"key": "members", "value_int": 1200},
    {"key": "beneficiaries", "value_int": 15000},
    {"key": "programs", "value_int": 12},
]


async def seed_admin(email: str, password: str, full_name: str) -> User:
    async with async_session() as session:
        result = await session.execute(select(User).where(User.email == email.strip().lower()))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email=email.strip().lower(),
                hashed_password=hash_password(password),
                full_name=full_name,
                is_active=True,
            )
            session.add(user)
            await session.flush()
            print(f"  ✅ {email} - created")
        else:
            print(f"  ⏭️  {email} - already exists")

        result = await session.execute(select(UserRoleAssignment).where(UserRoleAssignment.user_id == user.id))
        assignment = result.scalar_one_or_none()
        if assignment is None:
            session.add(UserRoleAssignment(user_id=user.id, role=AppRole.SUPERADMIN))
        else:
            assignment.role = AppRole.SUPERADMIN
        await session.commit()
        print(f"  👑 {email} - SUPERADMIN")
        return user


async def _insert(session, resource: str, form: ContentForm, actor: Actor) -> None:
    model = form.validate()
    if model is None:
        print(f"  ⚠️  {resource}: {form.errors}")
        return
    try:
        await content_store.insert(session, TABLES[resource], model.model_dump(), actor)
        print(f"  ✅ {resource}: {form.values.get('slug') or form.values.get('key')}")
    except ContentConflict:
        print(f"  ⏭️  {resource}: {form.values.get('slug') or form.values.get('key')} - already exists")


async def seed_demo(admin: User) -> None:
    actor = Actor(user_id=admin.id, user_agent="seed_admin")
    start = datetime.now(timezone.utc) + timedelta(days=14)
    async with async_session() as session:
        for values in DEMO_PROGRAMS:
            form = ContentForm(ProgramCreate)
            for name, value in values.items():
                form.set(name, value)
            await _insert(session, "programs", form, actor)

        event = ContentForm(EventCreate)
        event.set("title", {"ar": "اليوم العالمي للسكري", "en": "World Diabetes Day"})
        event.set("city", {"ar": "صنعاء", "en": "Sanaa"})
        event.set("start_at", start)
        event.set("end_at", start + timedelta(hours=4))
        event.set("status", "published")
        await _insert(session, "events", event, actor)

        for values in DEMO_KPIS:
            await _insert(session, "kpis", ContentForm(KpiCreate, values), actor)


async def main(args: argparse.Namespace) -> None:
    await init_db()
    admin = await seed_admin(args.email, args.password, args.full_name)
    if args.demo:
        await seed_demo(admin)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the first YDA Portal SUPERADMIN")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--full-name", default="Administrator")
    parser.add_argument("--demo", action="store_true", help="also seed demo programs, an event and KPIs")
    print("=" * 50)
    print("🏗️  YDA Portal - seeding administrator")
    print("=" * 50)
    asyncio.run(main(parser.parse_args()))
