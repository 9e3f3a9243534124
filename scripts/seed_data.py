"""Seed sample accounts, events and instructions

Creates a handful of admins, volunteers (spread over every team), events and
instructions through the configured identity provider and key-value store.
Point DATABASE_URL / REDIS_URL and SUPABASE_URL at the target environment
before running; with in-memory backends the data only lives for the run.
"""

import argparse
import logging

from rupantor import events as ev
from rupantor import instructions as ins
from rupantor.dependencies import get_identity_provider, get_kv_store
from rupantor.identity import IdentityProviderError
from rupantor.kv import delete_records
from rupantor.types import (
    ALL_TEAMS,
    EVENT_PREFIX,
    INSTRUCTION_PREFIX,
    TEAMS,
    Priority,
    Role,
)
from rupantor.users import new_profile, user_key

logger = logging.getLogger(__name__)

ADMINS = [
    {"name": "Kabir Hossain", "email": "kabir@example.com"},
    {"name": "Rima Das", "email": "rima@example.com"},
]

VOLUNTEERS = [
    {"name": "Ayesha Khan", "email": "ayesha@example.com", "team": TEAMS[0]},
    {"name": "Rahim Ali", "email": "rahim@example.com", "team": TEAMS[0]},
    {"name": "Sania Rahman", "email": "sania@example.com", "team": TEAMS[1]},
    {"name": "Tanvir Haque", "email": "tanvir@example.com", "team": TEAMS[2]},
    {"name": "Farhan Siddiqui", "email": "farhan@example.com", "team": TEAMS[3]},
]

EVENTS = [
    {
        "title": "Tree Plantation Drive",
        "description": "Planting campaign across the city with on-site training.",
        "date": "2025-11-15",
        "time": "08:00 AM",
        "location": "Ramna Park, Dhaka",
        "category": "campaign",
        "speakers": ["Dr. Sabuj Rahman"],
    },
    {
        "title": "Climate Action Workshop",
        "description": "Workshop on local climate impacts and practical responses.",
        "date": "2025-11-20",
        "time": "10:00 AM",
        "location": "Bangladesh University of Engineering",
        "category": "workshop",
        "speakers": ["Prof. Jolobayu Sen", "Dr. Shakti Islam"],
    },
    {
        "title": "Coastal Cleanup",
        "description": "Beach cleanup and plastic pollution awareness drive.",
        "date": "2025-11-25",
        "time": "06:00 AM",
        "location": "Cox's Bazar Beach",
        "category": "campaign",
        "speakers": [],
    },
]

INSTRUCTIONS = [
    {
        "title": "Prepare social media posts for the plantation drive",
        "description": "Three posts and one story, due a week before the event.",
        "priority": Priority.HIGH.value,
        "assigned_teams": [TEAMS[0], TEAMS[3]],
        "assigned_volunteers": [],
    },
    {
        "title": "Collect cleanup kit budget",
        "description": "Gloves, bags and transport quotes.",
        "priority": Priority.MEDIUM.value,
        "assigned_teams": [TEAMS[1]],
        "assigned_volunteers": [],
    },
    {
        "title": "Confirm attendance for the workshop",
        "description": "Reply in the volunteer group once confirmed.",
        "priority": Priority.LOW.value,
        "assigned_teams": [ALL_TEAMS],
        "assigned_volunteers": [],
    },
]


def create_account(identity, kv, person: dict, role: Role, password: str) -> dict | None:
    try:
        user = identity.create_user(
            person["email"],
            password,
            {"name": person["name"], "role": role.value, "team": person.get("team")},
        )
    except IdentityProviderError as exc:
        logger.warning("Skipping %s: %s", person["email"], exc)
        return None
    profile = new_profile(user.id, person["email"], person["name"], role, person.get("team"))
    kv.set(user_key(user.id), profile)
    return profile


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Seed sample data for local development.")
    parser.add_argument(
        "--password",
        default="password123",
        help="Password given to every seeded account.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print what would be created.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete existing events and instructions before seeding. Accounts are kept.",
    )
    args = parser.parse_args()

    if args.dry_run:
        for person in ADMINS:
            print(f"admin      {person['email']}")
        for person in VOLUNTEERS:
            print(f"volunteer  {person['email']} ({person['team']})")
        for event in EVENTS:
            print(f"event      {event['date']} {event['title']}")
        for instruction in INSTRUCTIONS:
            print(f"instruction {instruction['title']}")
        raise SystemExit(0)

    kv = get_kv_store()
    identity = get_identity_provider()

    if args.reset:
        removed = delete_records(kv, EVENT_PREFIX) + delete_records(kv, INSTRUCTION_PREFIX)
        logger.info("Removed %d existing events and instructions", removed)

    admins = [create_account(identity, kv, p, Role.ADMIN, args.password) for p in ADMINS]
    volunteers = [
        create_account(identity, kv, p, Role.VOLUNTEER, args.password) for p in VOLUNTEERS
    ]
    author = next((a for a in admins if a), None)

    for fields in EVENTS:
        event = ev.new_event(fields)
        kv.set(ev.event_key(event["id"]), event)

    for fields in INSTRUCTIONS:
        instruction = ins.new_instruction(
            fields,
            author["id"] if author else "seed",
            author["name"] if author else "Seed script",
        )
        kv.set(ins.instruction_key(instruction["id"]), instruction)

    print(
        f"Seeded {sum(1 for a in admins if a)} admins, "
        f"{sum(1 for v in volunteers if v)} volunteers, "
        f"{len(EVENTS)} events and {len(INSTRUCTIONS)} instructions."
    )
