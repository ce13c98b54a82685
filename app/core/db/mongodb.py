import logging

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from app.core.setting import config
from app.core.models.rbac import User, Role, Permission
from app.core.models.project import Project, Task
from app.core.models.production.monthly_plan import MonthlyPlan
from app.core.models.production.weekly_plan import WeeklyPlan
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.daily_report import DailyReport
from app.core.models.production.action_plan import ActionPlan
from app.core.models.production.production_task import ProductionTask

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [
    User, Role, Permission,
    Project, Task,
    MonthlyPlan, WeeklyPlan, DailyPlan, DailyReport,
    ActionPlan,
    ProductionTask,
]

motor_client = None


async def init_models(database) -> None:
    """Register every document model (and create its indexes) on `database`."""
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def connect_to_mongo():
    global motor_client

    motor_client = AsyncIOMotorClient(config.MONGODB_URL)
    await init_models(motor_client[config.DATABASE_NAME])
    logger.info("Connected to MongoDB database '%s'", config.DATABASE_NAME)


async def close_mongo_connection():
    global motor_client
    if motor_client:
        motor_client.close()
        motor_client = None
    logger.info("Closed MongoDB connection")
