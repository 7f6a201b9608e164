"""
Demo data for local development.

Creates three rescues, an admin, one rescue user per rescue, two regular
users and fifteen pets. Existing rows are removed first.
"""

import logging
from typing import Dict, List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    Application,
    AuditLog,
    CouponCode,
    Pet,
    PetSize,
    PetSpecies,
    Rescue,
    RescueRequest,
    Transaction,
    User,
    UserRole,
    generate_reference_number,
)
from .services.auth import hash_password
from .utils.config import AppSettings

logger = logging.getLogger(__name__)

ADMIN_PASSWORD = "admin123"  # nosec B105
RESCUE_PASSWORD = "rescue123"  # nosec B105
USER_PASSWORD = "user123"  # nosec B105

RESCUES = [
    {
        "name": "Capybara Haven",
        "location": "San Diego, CA",
        "contact_email": "capyhaven@example.com",
        "description": "A sanctuary dedicated to capybaras and their well-being.",
        "website_url": "https://capyhaven.example.com",
        "registration_number": "CA123456",
    },
    {
        "name": "Guinea Pig Paradise",
        "location": "Portland, OR",
        "contact_email": "guineapigparadise@example.com",
        "description": "Specializing in guinea pig rescue and rehabilitation.",
        "website_url": "https://guineapigparadise.example.com",
        "registration_number": "OR789012",
    },
    {
        "name": "Rocky Mountain Cavies",
        "location": "Denver, CO",
        "contact_email": "rockycavies@example.com",
        "description": "Rescue and rehabilitation center for rock cavies.",
        "website_url": "https://rockycavies.example.com",
        "registration_number": "CO345678",
    },
]

# (name, species, age, size, description, rescue index)
PETS = [
    ("Carlos", PetSpecies.CAPYBARA, 3, PetSize.LARGE, "Friendly and sociable capybara who loves swimming.", 0),
    ("Carla", PetSpecies.CAPYBARA, 2, PetSize.LARGE, "Playful capybara who enjoys sunbathing.", 0),
    ("Chip", PetSpecies.CAPYBARA, 1, PetSize.MEDIUM, "Young capybara learning to swim.", 0),
    ("Coco", PetSpecies.CAPYBARA, 4, PetSize.EXTRA_LARGE, "Senior capybara who loves attention.", 0),
    ("Cindy", PetSpecies.CAPYBARA, 2, PetSize.LARGE, "Active capybara who loves to play.", 0),
    ("Ginger", PetSpecies.GUINEA_PIG, 1, PetSize.SMALL, "Sweet guinea pig who loves cuddles.", 1),
    ("Gus", PetSpecies.GUINEA_PIG, 2, PetSize.SMALL, "Energetic guinea pig who loves to run.", 1),
    ("Gracie", PetSpecies.GUINEA_PIG, 1, PetSize.SMALL, "Shy guinea pig who needs a patient home.", 1),
    ("George", PetSpecies.GUINEA_PIG, 3, PetSize.SMALL, "Friendly guinea pig who loves treats.", 1),
    ("Gigi", PetSpecies.GUINEA_PIG, 2, PetSize.SMALL, "Playful guinea pig who loves to explore.", 1),
    ("Rocky", PetSpecies.ROCK_CAVY, 2, PetSize.MEDIUM, "Adventurous rock cavy who loves climbing.", 2),
    ("Rita", PetSpecies.ROCK_CAVY, 1, PetSize.MEDIUM, "Curious rock cavy who loves to explore.", 2),
    ("Rex", PetSpecies.ROCK_CAVY, 3, PetSize.MEDIUM, "Confident rock cavy who loves attention.", 2),
    ("Ruby", PetSpecies.ROCK_CAVY, 2, PetSize.MEDIUM, "Sweet rock cavy who loves to cuddle.", 2),
    ("Rocco", PetSpecies.ROCK_CAVY, 1, PetSize.MEDIUM, "Energetic rock cavy who loves to play.", 2),
]


async def clear_data(session: AsyncSession) -> None:
    """Delete every row, children before parents."""
    for model in (AuditLog, Transaction, Application, RescueRequest, CouponCode, Pet, User, Rescue):
        await session.execute(delete(model))


async def seed_database(session: AsyncSession, settings: AppSettings) -> Dict[str, int]:
    """
    Replace the database contents with the demo data and commit.

    Returns:
        Row counts per entity
    """
    await clear_data(session)

    rescues: List[Rescue] = []
    for data in RESCUES:
        rescue = Rescue(logo_url=f"{settings.upload_public_url}/images/logo.png", **data)
        session.add(rescue)
        rescues.append(rescue)
    await session.flush()

    rounds = settings.bcrypt_rounds
    users = [
        User(
            username="admin",
            email="admin@example.com",
            password_hash=hash_password(ADMIN_PASSWORD, rounds),
            role=UserRole.ADMIN,
        )
    ]
    rescue_hash = hash_password(RESCUE_PASSWORD, rounds)
    for index, rescue in enumerate(rescues, start=1):
        users.append(
            User(
                username=f"rescue{index}",
                email=f"rescue{index}@example.com",
                password_hash=rescue_hash,
                role=UserRole.RESCUE,
                rescue_id=rescue.id,
            )
        )
    user_hash = hash_password(USER_PASSWORD, rounds)
    for index in (1, 2):
        users.append(
            User(username=f"user{index}", email=f"user{index}@example.com", password_hash=user_hash)
        )
    session.add_all(users)

    references = set()
    for name, species, age, size, description, rescue_index in PETS:
        reference = generate_reference_number()
        while reference in references:
            reference = generate_reference_number()
        references.add(reference)
        session.add(
            Pet(
                reference_number=reference,
                name=name,
                species=species,
                age=age,
                size=size,
                description=description,
                image_url=f"{settings.upload_public_url}/images/{name.lower()}.jpg",
                rescue_id=rescues[rescue_index].id,
            )
        )

    await session.commit()
    counts = {"rescues": len(rescues), "users": len(users), "pets": len(PETS)}
    logger.info(f"Seeded database: {counts}")
    return counts
