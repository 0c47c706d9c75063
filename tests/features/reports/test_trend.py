import pytest

from app.features.reports.schemas.report import NewReport
from app.features.reports.services.scoring import summarize
from app.features.reports.services.trend import get_url_trend

OWNER = "user_123"
URL = "https://example.com"


async def scan_history(store, make_axe_results, make_violation, count, url=URL, owner=OWNER):
    created = []
    for i in range(count):
        axe_results = make_axe_results(
            violations=[make_violation(f"rule-{n}") for n in range(i % 4)],
            passes=i,
        )
        created.append(
            await store.create(
                NewReport(user_id=owner, url=url, axe_results=axe_results, summary=summarize(axe_results))
            )
        )
    return created


@pytest.mark.asyncio
async def test_trend_is_oldest_first_and_numbered_from_one(store, make_axe_results, make_violation):
    created = await scan_history(store, make_axe_results, make_violation, 3)

    trend = await get_url_trend(store, OWNER, URL)

    assert [point.index for point in trend] == [1, 2, 3]
    assert [point.passes for point in trend] == [0, 1, 2]
    assert [point.violations for point in trend] == [0, 1, 2]
    assert [point.timestamp for point in trend] == [report.timestamp for report in created]


@pytest.mark.asyncio
async def test_trend_is_capped_at_twenty_points(store, make_axe_results, make_violation):
    await scan_history(store, make_axe_results, make_violation, 25)

    trend = await get_url_trend(store, OWNER, URL)

    assert len(trend) == 20
    assert trend[0].index == 1 and trend[-1].index == 20
    # the oldest twenty scans
    assert [point.passes for point in trend] == list(range(20))


@pytest.mark.asyncio
async def test_trend_only_includes_matching_url_and_owner(store, make_axe_results, make_violation):
    await scan_history(store, make_axe_results, make_violation, 2)
    await scan_history(store, make_axe_results, make_violation, 3, url="https://other.example")
    await scan_history(store, make_axe_results, make_violation, 4, owner="user_456")

    trend = await get_url_trend(store, OWNER, URL)

    assert len(trend) == 2


@pytest.mark.asyncio
async def test_trend_for_unscanned_url_is_empty(store):
    assert await get_url_trend(store, OWNER, "https://never-scanned.example") == []


@pytest.mark.asyncio
async def test_trend_wire_format(store, make_axe_results, make_violation):
    await scan_history(store, make_axe_results, make_violation, 1)

    [point] = await get_url_trend(store, OWNER, URL)

    assert set(point.model_dump(by_alias=True)) == {"index", "violations", "incomplete", "passes", "timestamp"}
