from fastapi import APIRouter

from app.api.routes import auth, cron, projects, rbac, tasks, users
from app.api.routes.production import (action_plans, daily_plan, daily_report, monthly_plan,
                                       production_tasks, weekly_plan)

api_router = APIRouter()


api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(rbac.router)

api_router.include_router(monthly_plan.router)
api_router.include_router(weekly_plan.router)
api_router.include_router(daily_plan.router)
api_router.include_router(daily_report.router)
api_router.include_router(action_plans.router)
api_router.include_router(production_tasks.router)
api_router.include_router(cron.router)

api_router.include_router(projects.router)
api_router.include_router(tasks.router)
