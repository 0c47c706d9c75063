from fastapi import APIRouter, Depends, Query, status

from app.features.auth.dependencies.auth import get_current_user_id
from app.features.reports.dependencies.report import (
    get_report_store,
    get_scan_service,
    get_suggestion_service,
)
from app.features.reports.schemas.report import AnalyzeRequest
from app.features.reports.services.scanner import ScanService
from app.features.reports.services.store import ReportStore
from app.features.reports.services.suggestions import SuggestionService
from app.features.reports.services.trend import get_url_trend
from app.platform.config import settings
from app.platform.response import api_response

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/analyze", status_code=status.HTTP_201_CREATED)
async def analyze_url(
    payload: AnalyzeRequest,
    user_id: str = Depends(get_current_user_id),
    scanner: ScanService = Depends(get_scan_service),
):
    """
    Run an accessibility scan of a URL and store it as a new report.
    """
    report = await scanner.run_scan(payload.url, user_id)
    return api_response(
        data=report,
        message="Website analyzed",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("", status_code=200)
async def list_reports(
    user_id: str = Depends(get_current_user_id),
    store: ReportStore = Depends(get_report_store),
):
    """
    The user's latest reports, newest first (url, timestamp and summary only).
    """
    reports = await store.list_by_owner(user_id, limit=settings.REPORT_LIST_LIMIT)
    return api_response(data=reports)


@router.get("/by-url", status_code=200)
async def list_reports_for_url(
    url: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    store: ReportStore = Depends(get_report_store),
):
    """
    Reports for one URL, oldest first to show progression.
    """
    reports = await store.list_by_owner_and_url(user_id, url, limit=settings.REPORT_HISTORY_LIMIT)
    return api_response(data=reports)


@router.get("/trend", status_code=200)
async def url_trend(
    url: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    store: ReportStore = Depends(get_report_store),
):
    points = await get_url_trend(store, user_id, url, max_points=settings.TREND_MAX_POINTS)
    return api_response(data=points)


@router.get("/{report_id}", status_code=200)
async def get_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ReportStore = Depends(get_report_store),
):
    report = await store.get_by_id(report_id, user_id)
    return api_response(data=report)


@router.delete("/{report_id}", status_code=200)
async def delete_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ReportStore = Depends(get_report_store),
):
    """
    Delete a report. Only the owner can delete it.
    """
    await store.delete_by_id(report_id, user_id)
    return api_response(
        data={"deletedId": report_id},
        message="Report deleted successfully",
    )


@router.post("/{report_id}/ai-suggestions", status_code=200)
async def generate_ai_suggestions(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    suggestions: SuggestionService = Depends(get_suggestion_service),
):
    """
    Generate (or regenerate) remediation guidance for a report's violations.

    Falls back to rule-based guidance when the model is unavailable; `source`
    says which path produced the bundle.
    """
    result = await suggestions.enrich(report_id, user_id)
    data = result.bundle.model_dump(by_alias=True, mode="json")
    data["source"] = result.source
    data["generatedAt"] = result.generated_at.isoformat()
    return api_response(data=data, message="AI suggestions generated")
