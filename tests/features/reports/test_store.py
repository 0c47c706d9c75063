import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.features.reports.models.report import Report
from app.features.reports.schemas.report import NewReport, SuggestionBundle
from app.features.reports.services.scoring import summarize
from app.features.reports.services.store import ReportStore
from app.platform.errors import ReportNotFound, StoreError

OWNER = "user_123"
OTHER = "user_456"


def new_report(axe_results, owner=OWNER, url="https://example.com"):
    return NewReport(user_id=owner, url=url, axe_results=axe_results, summary=summarize(axe_results))


@pytest.fixture
def axe_results(make_axe_results, make_violation):
    return make_axe_results(violations=[make_violation(impact="critical", node_count=2)])


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamp(store, axe_results):
    report = await store.create(new_report(axe_results))

    assert report.id
    assert report.timestamp is not None
    assert report.user_id == OWNER
    assert report.summary.accessibility_score == 80
    assert report.axe_results["violations"][0]["id"] == "image-alt"
    assert report.ai_suggestions is None
    assert report.ai_generated_at is None


@pytest.mark.asyncio
async def test_create_persists_wire_shaped_summary(store, database, axe_results):
    report = await store.create(new_report(axe_results))

    async with database.session() as db:
        row = (await db.execute(select(Report).where(Report.id == report.id))).scalar_one()

    assert row.summary == {
        "violations": 1,
        "passes": 3,
        "incomplete": 1,
        "inapplicable": 2,
        "accessibilityScore": 80,
    }


@pytest.mark.asyncio
async def test_get_by_id_for_owner(store, axe_results):
    created = await store.create(new_report(axe_results))

    fetched = await store.get_by_id(created.id, OWNER)

    assert fetched.id == created.id
    assert fetched.url == "https://example.com"


@pytest.mark.asyncio
async def test_get_by_id_hides_other_users_reports(store, axe_results):
    created = await store.create(new_report(axe_results))

    with pytest.raises(ReportNotFound):
        await store.get_by_id(created.id, OTHER)


@pytest.mark.asyncio
async def test_get_by_id_unknown(store):
    with pytest.raises(ReportNotFound):
        await store.get_by_id("does-not-exist", OWNER)


@pytest.mark.asyncio
async def test_list_by_owner_newest_first_and_limited(store, axe_results):
    created = [await store.create(new_report(axe_results, url=f"https://example.com/{i}")) for i in range(4)]
    await store.create(new_report(axe_results, owner=OTHER))

    reports = await store.list_by_owner(OWNER, limit=3)

    assert [r.id for r in reports] == [created[3].id, created[2].id, created[1].id]


@pytest.mark.asyncio
async def test_list_items_project_summary_only(store, axe_results):
    await store.create(new_report(axe_results))

    [item] = await store.list_by_owner(OWNER)
    payload = item.model_dump(by_alias=True, mode="json")

    assert set(payload) == {"_id", "url", "timestamp", "summary"}
    assert payload["summary"]["accessibilityScore"] == 80


@pytest.mark.asyncio
async def test_list_by_owner_and_url_oldest_first(store, axe_results):
    first = await store.create(new_report(axe_results, url="https://a.example"))
    await store.create(new_report(axe_results, url="https://b.example"))
    second = await store.create(new_report(axe_results, url="https://a.example"))
    await store.create(new_report(axe_results, owner=OTHER, url="https://a.example"))

    reports = await store.list_by_owner_and_url(OWNER, "https://a.example")

    assert [r.id for r in reports] == [first.id, second.id]


@pytest.mark.asyncio
async def test_delete_by_other_user_is_not_found_and_keeps_report(store, axe_results):
    created = await store.create(new_report(axe_results))

    with pytest.raises(ReportNotFound):
        await store.delete_by_id(created.id, OTHER)

    still_there = await store.get_by_id(created.id, OWNER)
    assert still_there.id == created.id


@pytest.mark.asyncio
async def test_delete_by_owner_returns_deleted_report(store, axe_results):
    created = await store.create(new_report(axe_results))

    deleted = await store.delete_by_id(created.id, OWNER)

    assert deleted.id == created.id
    with pytest.raises(ReportNotFound):
        await store.get_by_id(created.id, OWNER)


@pytest.mark.asyncio
async def test_update_enrichment_sets_both_fields(store, axe_results):
    created = await store.create(new_report(axe_results))
    bundle = SuggestionBundle(suggestions=[], general_recommendations=["Use semantic HTML"])
    generated_at = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)

    await store.update_enrichment(created.id, OWNER, bundle, generated_at)

    report = await store.get_by_id(created.id, OWNER)
    assert report.ai_suggestions == {
        "suggestions": [],
        "generalRecommendations": ["Use semantic HTML"],
        "resourceLinks": [],
    }
    assert report.ai_generated_at.replace(tzinfo=None) == generated_at.replace(tzinfo=None)


@pytest.mark.asyncio
async def test_update_enrichment_overwrites(store, axe_results):
    created = await store.create(new_report(axe_results))
    first = SuggestionBundle(suggestions=[], general_recommendations=["one", "two"])
    second = SuggestionBundle(suggestions=[], general_recommendations=["three"])

    await store.update_enrichment(created.id, OWNER, first, store.clock())
    await store.update_enrichment(created.id, OWNER, second, store.clock())

    report = await store.get_by_id(created.id, OWNER)
    assert report.ai_suggestions["generalRecommendations"] == ["three"]


@pytest.mark.asyncio
async def test_update_enrichment_for_other_user_is_not_found(store, axe_results):
    created = await store.create(new_report(axe_results))
    bundle = SuggestionBundle(suggestions=[])

    with pytest.raises(ReportNotFound):
        await store.update_enrichment(created.id, OTHER, bundle, store.clock())

    report = await store.get_by_id(created.id, OWNER)
    assert report.ai_suggestions is None
    assert report.ai_generated_at is None


@pytest.mark.asyncio
async def test_persistence_failure_becomes_store_error(axe_results):
    database = MagicMock()
    database.session.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))
    broken_store = ReportStore(database)

    with pytest.raises(StoreError):
        await broken_store.create(new_report(axe_results))
