"""Statistics router - dashboard counts."""
from fastapi import APIRouter, Depends

from goal_tracker.models.statistics import GoalSummary, TaskStatistics
from goal_tracker.routers.common import get_statistics_service
from goal_tracker.services.statistics_service import StatisticsService


router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("", response_model=TaskStatistics)
async def get_statistics(service: StatisticsService = Depends(get_statistics_service)):
    """Completed/total counts for daily, weekly and today's weekly tasks."""
    return await service.get_statistics()


@router.get("/goals", response_model=GoalSummary)
async def get_goal_summary(service: StatisticsService = Depends(get_statistics_service)):
    """Goal count, completed goals, average progress and task block total."""
    return await service.get_goal_summary()
