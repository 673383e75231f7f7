# adoptme/services/mocking.py
# Development-only fake data
from datetime import datetime, timedelta
from uuid import uuid4
import logging
import random

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..security import hash_password

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    {
        "user_name": "user",
        "first_name": "Default",
        "last_name": "User",
        "email": "user@adoptme.com",
        "password": "User123!",
        "age": 30,
        "role": "user",
    },
    {
        "user_name": "admin",
        "first_name": "Default",
        "last_name": "Admin",
        "email": "admin@adoptme.com",
        "password": "Admin123!",
        "age": 35,
        "role": "admin",
    },
]
MOCK_PASSWORD = "Password123"

FIRST_NAMES = [
    "Lucia", "Martin", "Sofia", "Hugo", "Valeria", "Mateo", "Paula", "Leo",
    "Emma", "Daniel", "Julia", "Pablo", "Alba", "Alvaro", "Carla", "Diego",
]
LAST_NAMES = [
    "Garcia", "Lopez", "Martinez", "Sanchez", "Perez", "Gomez", "Ruiz",
    "Diaz", "Moreno", "Navarro", "Torres", "Romero", "Vidal", "Castro",
]
EMAIL_DOMAINS = ["example.com", "example.org", "example.net"]

PET_NAMES = [
    "Luna", "Max", "Coco", "Rocky", "Nala", "Simba", "Kira", "Toby", "Bella",
    "Thor", "Lola", "Bruno", "Mia", "Zeus", "Canela", "Milo", "Nube", "Chispa",
]
BREEDS = {
    "dog": ["Labrador", "Beagle", "German Shepherd", "Bulldog", "Poodle", "Mixed"],
    "cat": ["Siamese", "Persian", "Maine Coon", "Bengal", "European Shorthair"],
    "rabbit": ["Holland Lop", "Mini Rex", "Lionhead"],
    "bird": ["Budgerigar", "Cockatiel", "Canary"],
    "other": ["Hamster", "Guinea Pig", "Ferret"],
}
CHARACTERISTICS = [
    "friendly", "playful", "calm", "energetic", "vaccinated", "neutered",
    "good with kids", "good with cats", "house trained", "shy",
]
DESCRIPTIONS = [
    "Looking for a loving home.",
    "Loves long walks and cuddles.",
    "Gentle and curious, gets along with everyone.",
    "Rescued last month, fully recovered and ready to go.",
]


def _random_past(days: int = 365) -> datetime:
    return datetime.utcnow() - timedelta(days=random.randint(0, days), minutes=random.randint(0, 1440))


class MockingService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _mock_pet(self) -> dict:
        species = random.choice(list(BREEDS))
        created = _random_past()
        return {
            "name": random.choice(PET_NAMES),
            "breed": random.choice(BREEDS[species]),
            "age": random.randint(0, 15),
            "species": species,
            "gender": random.choice(["male", "female"]),
            "owner": None,
            "status": "available",
            "description": random.choice(DESCRIPTIONS),
            "image": f"https://placedog.net/500/500?id={random.randint(1, 200)}",
            "characteristics": random.sample(CHARACTERISTICS, k=random.randint(1, 4)),
            "liked_by": [],
            "created_at": created,
            "updated_at": created,
        }

    def _mock_user(self, password_hash: str) -> dict:
        first = random.choice(FIRST_NAMES)
        last = random.choice(LAST_NAMES)
        user_name = f"{first}.{last}.{uuid4().hex[:6]}".lower()
        created = _random_past()
        return {
            "user_name": user_name,
            "first_name": first,
            "last_name": last,
            "email": f"{user_name}@{random.choice(EMAIL_DOMAINS)}",
            "password_hash": password_hash,
            "age": random.randint(18, 80),
            "role": "user",
            "is_email_verified": random.random() < 0.5,
            "documents": [],
            "last_connection": None,
            "created_at": created,
            "updated_at": created,
        }

    async def ensure_default_users(self) -> int:
        created = 0
        for account in DEFAULT_ACCOUNTS:
            existing = await self.db.users.find_one(
                {"$or": [{"email": account["email"]}, {"user_name": account["user_name"]}]},
                {"email": 1},
            )
            if existing:
                if existing.get("email") != account["email"]:
                    logger.warning(f"Default account {account['email']} skipped: user name {account['user_name']} is taken")
                continue
            now = datetime.utcnow()
            doc = {k: v for k, v in account.items() if k != "password"}
            doc.update({
                "password_hash": hash_password(account["password"]),
                "is_email_verified": True,
                "documents": [],
                "last_connection": None,
                "created_at": now,
                "updated_at": now,
            })
            await self.db.users.insert_one(doc)
            created += 1
            logger.info(f"Default account {account['email']} created")
        return created

    async def generate_mock_pets(self, count: int = 100) -> int:
        if count <= 0:
            return 0
        res = await self.db.pets.insert_many([self._mock_pet() for _ in range(count)])
        logger.info(f"Generated {len(res.inserted_ids)} mock pets")
        return len(res.inserted_ids)

    async def generate_mock_users(self, count: int = 50) -> int:
        """Inserts `count` random users plus the default accounts when missing."""
        created = await self.ensure_default_users()
        if count > 0:
            password_hash = hash_password(MOCK_PASSWORD)
            res = await self.db.users.insert_many([self._mock_user(password_hash) for _ in range(count)])
            created += len(res.inserted_ids)
        logger.info(f"Generated {created} mock users")
        return created

    async def generate_data(self, users: int, pets: int) -> dict:
        users_generated = await self.generate_mock_users(users)
        pets_generated = await self.generate_mock_pets(pets)
        return {
            "users_generated": users_generated,
            "pets_generated": pets_generated,
            "total_records": users_generated + pets_generated,
        }

    async def clear_pets(self) -> int:
        res = await self.db.pets.delete_many({})
        logger.warning(f"Deleted {res.deleted_count} pets")
        return res.deleted_count

    async def clear_users(self) -> int:
        res = await self.db.users.delete_many({})
        logger.warning(f"Deleted {res.deleted_count} users")
        return res.deleted_count
