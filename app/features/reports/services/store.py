"""
Report persistence.

Every read and write is scoped by owner. A report that exists but belongs to
somebody else is reported exactly like a missing one.
"""
from datetime import datetime
from typing import Callable, List

from sqlalchemy import select, update, delete, asc, desc
from sqlalchemy.exc import SQLAlchemyError

from app.features.reports.models.report import Report
from app.features.reports.schemas.report import (
    NewReport,
    ReportOut,
    ReportListItem,
    ReportSummary,
    SuggestionBundle,
)
from app.platform.db.base import utcnow
from app.platform.db.session import Database
from app.platform.errors import ReportNotFound, StoreError
from app.platform.logger import get_logger

logger = get_logger(__name__)


def to_report_out(report: Report) -> ReportOut:
    return ReportOut(
        id=report.id,
        user_id=report.user_id,
        url=report.url,
        timestamp=report.timestamp,
        axe_results=report.axe_results,
        summary=ReportSummary.model_validate(report.summary),
        ai_suggestions=report.ai_suggestions,
        ai_generated_at=report.ai_generated_at,
    )


class ReportStore:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow):
        self.database = database
        self.clock = clock

    async def create(self, new_report: NewReport) -> ReportOut:
        report = Report(
            user_id=new_report.user_id,
            url=new_report.url,
            axe_results=new_report.axe_results,
            summary=new_report.summary.model_dump(by_alias=True),
            created_at=self.clock(),
        )
        try:
            async with self.database.session() as db:
                db.add(report)
                await db.commit()
                await db.refresh(report)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store report for {new_report.url}: {e}")
            raise StoreError(f"create failed: {e}") from e

        logger.info(f"Stored report {report.id} for user {report.user_id}")
        return to_report_out(report)

    async def get_by_id(self, report_id: str, owner_id: str) -> ReportOut:
        try:
            async with self.database.session() as db:
                result = await db.execute(
                    select(Report).where(
                        Report.id == report_id,
                        Report.user_id == owner_id,
                    )
                )
                report = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load report {report_id}: {e}")
            raise StoreError(f"get failed: {e}") from e

        if not report:
            raise ReportNotFound()
        return to_report_out(report)

    async def list_by_owner(self, owner_id: str, limit: int = 50) -> List[ReportListItem]:
        query = (
            select(Report.id, Report.url, Report.created_at, Report.summary)
            .where(Report.user_id == owner_id)
            .order_by(desc(Report.created_at), desc(Report.id))
            .limit(limit)
        )
        return await self._list(query, f"user {owner_id}")

    async def list_by_owner_and_url(self, owner_id: str, url: str, limit: int = 20) -> List[ReportListItem]:
        # Oldest first to show progression
        query = (
            select(Report.id, Report.url, Report.created_at, Report.summary)
            .where(Report.user_id == owner_id, Report.url == url)
            .order_by(asc(Report.created_at), asc(Report.id))
            .limit(limit)
        )
        return await self._list(query, f"user {owner_id} url {url}")

    async def _list(self, query, label: str) -> List[ReportListItem]:
        try:
            async with self.database.session() as db:
                result = await db.execute(query)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list reports for {label}: {e}")
            raise StoreError(f"list failed: {e}") from e

        logger.info(f"Found {len(rows)} reports for {label}")
        return [
            ReportListItem(
                id=row.id,
                url=row.url,
                timestamp=row.created_at,
                summary=ReportSummary.model_validate(row.summary),
            )
            for row in rows
        ]

    async def delete_by_id(self, report_id: str, owner_id: str) -> ReportOut:
        try:
            async with self.database.session() as db:
                result = await db.execute(
                    select(Report).where(
                        Report.id == report_id,
                        Report.user_id == owner_id,
                    )
                )
                report = result.scalar_one_or_none()
                if not report:
                    raise ReportNotFound()

                deleted = to_report_out(report)
                await db.execute(
                    delete(Report).where(
                        Report.id == report_id,
                        Report.user_id == owner_id,
                    )
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete report {report_id}: {e}")
            raise StoreError(f"delete failed: {e}") from e

        logger.info(f"Deleted report {report_id} for user {owner_id}")
        return deleted

    async def update_enrichment(
        self,
        report_id: str,
        owner_id: str,
        bundle: SuggestionBundle,
        generated_at: datetime,
    ) -> None:
        """Overwrite both enrichment fields in one UPDATE (never one without the other)."""
        try:
            async with self.database.session() as db:
                result = await db.execute(
                    update(Report)
                    .where(
                        Report.id == report_id,
                        Report.user_id == owner_id,
                    )
                    .values(
                        ai_suggestions=bundle.model_dump(by_alias=True, mode="json"),
                        ai_generated_at=generated_at,
                    )
                )
                if result.rowcount == 0:
                    await db.rollback()
                    raise ReportNotFound()
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to store suggestions for report {report_id}: {e}")
            raise StoreError(f"update failed: {e}") from e
