# adoptme/services/stats.py
import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


class StatsService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def get_app_stats(self) -> dict:
        (
            total_users,
            total_pets,
            total_adoptions,
            total_notifications,
            available_pets,
            adopted_pets,
            pending_adoptions,
            approved_adoptions,
            rejected_adoptions,
        ) = await asyncio.gather(
            self.db.users.count_documents({}),
            self.db.pets.count_documents({}),
            self.db.adoptions.count_documents({}),
            self.db.notifications.count_documents({}),
            self.db.pets.count_documents({"status": "available"}),
            self.db.pets.count_documents({"status": "adopted"}),
            self.db.adoptions.count_documents({"status": "pending"}),
            self.db.adoptions.count_documents({"status": "approved"}),
            self.db.adoptions.count_documents({"status": "rejected"}),
        )
        logger.debug("Application stats computed")
        return {
            "total_users": total_users,
            "total_pets": total_pets,
            "total_adoptions": total_adoptions,
            "total_notifications": total_notifications,
            "available_pets": available_pets,
            "adopted_pets": adopted_pets,
            "pending_adoptions": pending_adoptions,
            "approved_adoptions": approved_adoptions,
            "rejected_adoptions": rejected_adoptions,
        }

    async def get_adoption_summary(self) -> dict:
        total, pending, approved = await asyncio.gather(
            self.db.adoptions.count_documents({}),
            self.db.adoptions.count_documents({"status": "pending"}),
            self.db.adoptions.count_documents({"status": "approved"}),
        )
        return {"total_adoptions": total, "pending_adoptions": pending, "happy_families": approved}
