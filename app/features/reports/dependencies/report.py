from fastapi import Depends, Request

from app.features.reports.services.axe import AxeService
from app.features.reports.services.browser import BrowserService
from app.features.reports.services.llm import CompletionService
from app.features.reports.services.scanner import ScanService
from app.features.reports.services.store import ReportStore
from app.features.reports.services.suggestions import SuggestionService
from app.platform.db.session import Database


def get_database(request: Request) -> Database:
    """The Database connected by the application lifespan."""
    return request.app.state.database


def get_report_store(database: Database = Depends(get_database)) -> ReportStore:
    return ReportStore(database)


def get_axe_service(request: Request) -> AxeService:
    return request.app.state.axe


def get_browser_service() -> BrowserService:
    return BrowserService.from_settings()


def get_scan_service(
    store: ReportStore = Depends(get_report_store),
    browser: BrowserService = Depends(get_browser_service),
    axe: AxeService = Depends(get_axe_service),
) -> ScanService:
    return ScanService(store=store, browser=browser, axe=axe)


def get_completion_service() -> CompletionService:
    return CompletionService.from_settings()


def get_suggestion_service(
    store: ReportStore = Depends(get_report_store),
    completion: CompletionService = Depends(get_completion_service),
) -> SuggestionService:
    return SuggestionService(store=store, completion=completion)
