"""Tests for stats response parsers and the stats fetcher."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from healthscan_admin.server.errors import NetworkError, RequestTimeout
from healthscan_admin.server.models import FALLBACK_STATS, DatabaseStats
from healthscan_admin.server.stats import (
    LEGACY_CATEGORIES,
    StatsFetcher,
    parse_flat,
    parse_legacy,
    parse_nested,
    parse_stats,
)
from healthscan_admin.server.transport import BackendClient

LEGACY_PAYLOAD = {
    "nutrients": 10,
    "products": 5,
    "ingredients": 0,
    "pollutants": 2,
    "parasites": 0,
    "meals": 3,
    "scans": 1,
    "waitlist": 0,
}

# ─── Parser tests ───


class TestParseNested:
    def test_nested(self):
        data = {
            "success": True,
            "stats": {
                "totalRecords": 40,
                "categoryBreakdown": {"products": 30, "meals": 10},
                "recentActivity": 7,
                "dataQuality": 90,
            },
        }
        stats = parse_nested(data)
        assert stats == DatabaseStats(
            total_records=40,
            category_breakdown={"products": 30, "meals": 10},
            recent_activity=7,
            data_quality=90,
        )

    def test_not_nested(self):
        assert parse_nested({"totalRecords": 1}) is None
        assert parse_nested({"stats": "n/a"}) is None
        assert parse_nested([1, 2]) is None


class TestParseFlat:
    def test_flat(self):
        data = {"totalRecords": 12, "categoryBreakdown": {"scans": 12}, "recentActivity": 4, "dataQuality": 60}
        stats = parse_flat(data)
        assert stats.total_records == 12
        assert stats.category_breakdown == {"scans": 12}
        assert stats.recent_activity == 4
        assert stats.data_quality == 60

    def test_missing_fields_default(self):
        stats = parse_flat({"totalRecords": None})
        assert stats == DatabaseStats(total_records=0, category_breakdown={}, recent_activity=0, data_quality=0)

    def test_total_not_reconciled_with_breakdown(self):
        stats = parse_flat({"totalRecords": 5, "categoryBreakdown": {"meals": 100}})
        assert stats.total_records == 5

    def test_not_flat(self):
        assert parse_flat({"nutrients": 1}) is None


class TestParseLegacy:
    def test_legacy_scenario(self):
        stats = parse_legacy(LEGACY_PAYLOAD)
        assert stats.total_records == 21
        assert stats.data_quality == 75
        assert stats.recent_activity == 21
        assert stats.total_records == sum(stats.category_breakdown.values())

    def test_recent_activity_capped(self):
        stats = parse_legacy({"products": 250, "meals": 50})
        assert stats.total_records == 300
        assert stats.recent_activity == 100

    def test_all_zero(self):
        stats = parse_legacy({"nutrients": 0})
        assert stats.total_records == 0
        assert stats.data_quality == 25
        assert set(stats.category_breakdown) == set(LEGACY_CATEGORIES)

    def test_not_legacy(self):
        assert parse_legacy({"unrelated": 3}) is None


class TestParseStats:
    def test_nested_wins_over_flat(self):
        data = {"stats": {"totalRecords": 1}, "totalRecords": 99}
        assert parse_stats(data).total_records == 1

    def test_flat_wins_over_legacy(self):
        data = {"totalRecords": 3, "nutrients": 50}
        assert parse_stats(data).total_records == 3

    def test_unrecognized(self):
        assert parse_stats({"success": True}) is None
        assert parse_stats(None) is None


# ─── Fetcher tests ───


@pytest.fixture()
def fetcher(backend_client: BackendClient) -> StatsFetcher:
    return StatsFetcher(backend_client)


def _assert_fallback(stats: DatabaseStats) -> None:
    assert stats == FALLBACK_STATS
    assert stats.is_fallback
    assert stats is not FALLBACK_STATS


class TestFetchStats:
    @pytest.mark.asyncio
    async def test_legacy_response(self, fetcher: StatsFetcher, backend_client: BackendClient):
        with patch.object(backend_client, "get", AsyncMock(return_value=httpx.Response(200, json=LEGACY_PAYLOAD))):
            stats = await fetcher.fetch_stats()
        assert stats.total_records == 21
        assert stats.data_quality == 75
        assert stats.recent_activity == 21

    @pytest.mark.asyncio
    async def test_uses_stats_endpoints_in_order(self, fetcher: StatsFetcher, backend_client: BackendClient):
        side_effect = [NetworkError("down"), httpx.Response(200, json={"totalRecords": 2})]
        with patch.object(backend_client, "get", AsyncMock(side_effect=side_effect)) as mock_get:
            stats = await fetcher.fetch_stats(3.0)
        assert stats.total_records == 2
        assert [c.args for c in mock_get.call_args_list] == [
            ("/admin/stats", 3.0),
            ("/admin/database-stats", 3.0),
        ]

    @pytest.mark.asyncio
    async def test_404_returns_fallback_without_parsing(self, fetcher: StatsFetcher, backend_client: BackendClient):
        resp = httpx.Response(404, json={"totalRecords": 500})
        with (
            patch.object(backend_client, "get", AsyncMock(return_value=resp)),
            patch("healthscan_admin.server.stats.parse_stats") as mock_parse,
        ):
            stats = await fetcher.fetch_stats()
        _assert_fallback(stats)
        mock_parse.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error_returns_fallback(self, fetcher: StatsFetcher, backend_client: BackendClient, caplog):
        with patch.object(backend_client, "get", AsyncMock(return_value=httpx.Response(500))):
            with caplog.at_level(logging.WARNING, logger="healthscan_admin.server.stats"):
                stats = await fetcher.fetch_stats()
        _assert_fallback(stats)
        assert any("Stats request failed: 500" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_unrecognized_shape_returns_fallback(self, fetcher: StatsFetcher, backend_client: BackendClient, caplog):
        with patch.object(backend_client, "get", AsyncMock(return_value=httpx.Response(200, json={"hello": 1}))):
            with caplog.at_level(logging.WARNING, logger="healthscan_admin.server.stats"):
                stats = await fetcher.fetch_stats()
        _assert_fallback(stats)
        assert any("Unexpected stats response format" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_invalid_values_return_fallback(self, fetcher: StatsFetcher, backend_client: BackendClient):
        resp = httpx.Response(200, json={"totalRecords": 1, "dataQuality": 400})
        with patch.object(backend_client, "get", AsyncMock(return_value=resp)):
            _assert_fallback(await fetcher.fetch_stats())

    @pytest.mark.asyncio
    async def test_total_outage_returns_fallback(self, fetcher: StatsFetcher, backend_client: BackendClient):
        with patch.object(backend_client, "get", AsyncMock(side_effect=RequestTimeout(8.0))):
            _assert_fallback(await fetcher.fetch_stats())

    @pytest.mark.asyncio
    async def test_bad_json_returns_fallback(self, fetcher: StatsFetcher, backend_client: BackendClient):
        with patch.object(backend_client, "get", AsyncMock(return_value=httpx.Response(200, text="oops"))):
            _assert_fallback(await fetcher.fetch_stats())


class TestFetchCategoryBreakdown:
    @pytest.mark.asyncio
    async def test_projects_breakdown(self, fetcher: StatsFetcher, backend_client: BackendClient):
        with patch.object(backend_client, "get", AsyncMock(return_value=httpx.Response(200, json=LEGACY_PAYLOAD))):
            breakdown = await fetcher.fetch_category_breakdown()
        assert breakdown["nutrients"] == 10
        assert breakdown["waitlist"] == 0

    @pytest.mark.asyncio
    async def test_failure_gives_fallback_breakdown(self, fetcher: StatsFetcher, backend_client: BackendClient):
        with patch.object(backend_client, "get", AsyncMock(side_effect=NetworkError("down"))):
            breakdown = await fetcher.fetch_category_breakdown()
        assert breakdown == FALLBACK_STATS.category_breakdown


class TestFallbackIsolation:
    @pytest.mark.asyncio
    async def test_changing_returned_breakdown_does_not_leak(
        self, fetcher: StatsFetcher, backend_client: BackendClient
    ):
        with patch.object(backend_client, "get", AsyncMock(side_effect=NetworkError("down"))):
            first = await fetcher.fetch_stats()
            first.category_breakdown["nutrients"] = 999
            second = await fetcher.fetch_stats()

        assert second.category_breakdown["nutrients"] == 0
        assert FALLBACK_STATS.category_breakdown["nutrients"] == 0

    @pytest.mark.asyncio
    async def test_changing_fallback_category_breakdown_does_not_leak(
        self, fetcher: StatsFetcher, backend_client: BackendClient
    ):
        with patch.object(backend_client, "get", AsyncMock(side_effect=NetworkError("down"))):
            breakdown = await fetcher.fetch_category_breakdown()
            breakdown["meals"] = 7
            again = await fetcher.fetch_category_breakdown()
        assert again["meals"] == 0

    def test_constant_is_read_only(self):
        with pytest.raises(TypeError):
            FALLBACK_STATS.category_breakdown["nutrients"] = 1
