"""Sample data seeder: staff roles, routing agents and a few leads."""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from admission_routing.core.config import settings
from admission_routing.core.constants import (
    ADMISSION_EXECUTIVE_ROLE,
    ADMISSION_MANAGER_ROLE,
    LEAD_STATUS_NEW,
)
from admission_routing.core.identifiers import generate_lead_reference
from admission_routing.models import Agent, Lead, Role

# Roles outside the routing pair exist so that the router has
# something to ignore
ROLE_NAMES = [
    "Super Admin",
    ADMISSION_MANAGER_ROLE,
    ADMISSION_EXECUTIVE_ROLE,
    "Marketing Manager",
]

# (name, role, weightage, is_available)
AGENT_SPECS = [
    ("Priya Raman", ADMISSION_MANAGER_ROLE, 2, True),
    ("Karthik Subramanian", ADMISSION_MANAGER_ROLE, 1, True),
    ("Divya Natarajan", ADMISSION_EXECUTIVE_ROLE, 3, True),
    ("Arun Kumar", ADMISSION_EXECUTIVE_ROLE, 1, True),
    ("Meena Lakshmi", ADMISSION_EXECUTIVE_ROLE, 1, False),
    ("Suresh Babu", "Marketing Manager", 1, True),
    ("Admin User", "Super Admin", 1, True),
]

SOURCE_WEBSITES = ["egspec.org", "egspgroup.in", "egsppharmacy.org"]
COURSES = ["B.E. CSE", "B.E. ECE", "MBA", "B.Pharm", "B.Sc Nursing"]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_maker() as session:
        print("Seeding admission routing sample data")

        # TRUNCATE ... CASCADE handles FK ordering on re-runs
        await session.execute(text("TRUNCATE TABLE leads, users, roles CASCADE"))
        await session.commit()
        print("Cleared existing data")

        # 1. Roles
        roles = {name: Role(id=str(uuid4()), name=name) for name in ROLE_NAMES}
        session.add_all(roles.values())
        await session.flush()
        print(f"Created {len(roles)} roles")

        # 2. Staff users; only managers and executives are routable
        agents = []
        for i, (name, role_name, weightage, available) in enumerate(AGENT_SPECS, 1):
            agent = Agent(
                id=str(uuid4()),
                name=name,
                email=f"staff{i}@egsp.edu.in",
                phone=f"98400{i:05d}",
                role_id=roles[role_name].id,
                is_available=available,
                weightage=weightage,
                active_leads_count=0,
            )
            session.add(agent)
            agents.append(agent)
        await session.flush()
        print(f"Created {len(agents)} staff users")

        # 3. Leads dealt over the routable agents so the counters start uneven
        routable = [
            a
            for a in agents
            if a.is_available
            and a.role_id
            in (roles[ADMISSION_MANAGER_ROLE].id, roles[ADMISSION_EXECUTIVE_ROLE].id)
        ]
        now = datetime.now(timezone.utc)
        year = str(now.year)
        for i in range(20):
            agent = routable[i % len(routable)] if i % 3 else routable[0]
            created = now - timedelta(hours=20 - i)
            session.add(
                Lead(
                    id=str(uuid4()),
                    lead_reference_id=generate_lead_reference(created),
                    name=f"Student {i + 1}",
                    phone=f"9{876500000 + i:09d}",
                    email=f"student{i + 1}@example.com",
                    course=COURSES[i % len(COURSES)],
                    state="Tamil Nadu",
                    district="Nagapattinam",
                    admission_year=year,
                    source_website=SOURCE_WEBSITES[i % len(SOURCE_WEBSITES)],
                    utm_params={},
                    form_data={},
                    assigned_to=agent.id,
                    status=LEAD_STATUS_NEW,
                    created_at=created,
                    updated_at=created,
                )
            )
            agent.active_leads_count += 1
            agent.last_assigned_at = created
        await session.commit()
        print("Created 20 leads")

        # Validation
        lead_cnt = (await session.execute(select(func.count(Lead.id)))).scalar_one()
        print("\nValidation:")
        print(f"  Leads: {lead_cnt}")
        for agent in routable:
            print(
                f"  {agent.name}: {agent.active_leads_count} lead(s), "
                f"weightage {agent.weightage}"
            )
        print("Seeding complete")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
