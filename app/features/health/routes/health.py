from fastapi import APIRouter, Depends, status

from app.features.reports.dependencies.report import get_completion_service, get_database
from app.features.reports.services.llm import CompletionService
from app.platform.db.session import Database
from app.platform.response import api_response


router = APIRouter()

@router.get("/health", tags=["health"])
async def health_check(
    check_ai: bool = False,
    database: Database = Depends(get_database),
    completion: CompletionService = Depends(get_completion_service),
):
    """
    Liveness plus a database ping. `?check_ai=true` also probes the
    suggestions model key (one billed call).
    """
    db_ok = await database.ping()
    data = {"status": "ok" if db_ok else "degraded", "service": "A11y Audit AI", "database": db_ok}
    if check_ai:
        data["ai"] = await completion.validate_api_key()

    return api_response(
        data=data,
        message="Service is healthy" if db_ok else "Service is degraded",
        status_code=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
