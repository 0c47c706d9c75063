from typing import List

from app.features.reports.schemas.report import TrendPoint
from app.features.reports.services.store import ReportStore


async def get_url_trend(store: ReportStore, owner_id: str, url: str, max_points: int = 20) -> List[TrendPoint]:
    """Summary counts for repeated scans of one URL, oldest first, numbered from 1."""
    reports = await store.list_by_owner_and_url(owner_id, url, limit=max_points)
    return [
        TrendPoint(
            index=position,
            violations=report.summary.violations,
            incomplete=report.summary.incomplete,
            passes=report.summary.passes,
            timestamp=report.timestamp,
        )
        for position, report in enumerate(reports[:max_points], start=1)
    ]
