from sqlalchemy import Column, String, Text, DateTime, JSON, Index, CheckConstraint
from sqlalchemy.orm import synonym

from app.platform.db.base import BaseModel


class Report(BaseModel):
    """
    One accessibility scan of one URL, owned by one user.

    Everything except the enrichment pair (ai_suggestions / ai_generated_at)
    is written once at creation.
    """

    __tablename__ = "reports"

    user_id = Column(String, nullable=False, index=True)
    url = Column(Text, nullable=False)

    # Raw axe-core output: {violations, passes, incomplete, inapplicable}
    axe_results = Column(JSON, nullable=False)

    # {violations, passes, incomplete, inapplicable, accessibilityScore}
    summary = Column(JSON, nullable=False)

    ai_suggestions = Column(JSON(none_as_null=True), nullable=True)
    ai_generated_at = Column(DateTime(timezone=True), nullable=True)

    # Creation time is the report timestamp
    timestamp = synonym("created_at")

    __table_args__ = (
        CheckConstraint(
            '(ai_suggestions IS NULL AND ai_generated_at IS NULL) OR '
            '(ai_suggestions IS NOT NULL AND ai_generated_at IS NOT NULL)',
            name='check_ai_enrichment_pair'
        ),
        Index('idx_reports_user_created', 'user_id', 'created_at'),
        Index('idx_reports_user_url_created', 'user_id', 'url', 'created_at'),
    )

    def __repr__(self):
        return f"<Report(id={self.id}, url='{self.url}')>"
