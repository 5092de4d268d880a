"""Route Dependencies: acting user and repository wiring shared by the routers.

Invariants:
    - The acting user id always comes from the X-User-Id header; a request
      without it fails validation (400) before reaching a service
    - One SqlKitMapRepository per request, bound to the request's session
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from kitmap.config import get_settings
from kitmap.core.domain_types import UserId
from kitmap.infrastructure.database import get_db
from kitmap.infrastructure.repository import SqlKitMapRepository
from kitmap.services.assignment_analytics import AssignmentAnalyticsService
from kitmap.services.diagnosis_workflow import DiagnosisWorkflow


async def get_user_id(
    x_user_id: str = Header(..., min_length=1, max_length=64),
) -> UserId:
    return UserId(x_user_id)


async def get_repository(
    db: AsyncSession = Depends(get_db),
) -> SqlKitMapRepository:
    return SqlKitMapRepository(db)


async def get_workflow(
    repo: SqlKitMapRepository = Depends(get_repository),
) -> DiagnosisWorkflow:
    return DiagnosisWorkflow(repo)


async def get_analytics_service(
    repo: SqlKitMapRepository = Depends(get_repository),
) -> AssignmentAnalyticsService:
    return AssignmentAnalyticsService(
        repo, filename_prefix=get_settings().export_filename_prefix,
    )
