"""
Ingestion orchestrator tests.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock
import pytest
from sentinel.common.cache import TTLCache
from sentinel.common.errors import IngestionError, UpstreamError
from sentinel.core.models import GeocodeFailure
from sentinel.orchestrators.ingestion import IngestionOrchestrator, response_cache_key


@pytest.fixture
def client():
    client = Mock()
    client.fetch_incidents_until = AsyncMock(return_value=[])
    return client


@pytest.fixture
def html_source():
    source = Mock()
    source.fetch_incidents = AsyncMock(return_value=[])
    return source


@pytest.fixture
def resolver(success):
    resolver = Mock()
    resolver.geocode_one = AsyncMock(return_value=success(lat=33.6, lon=-117.3, approximate=True))
    return resolver


@pytest.fixture
def orchestrator(client, html_source, resolver, clock):
    return IngestionOrchestrator(client, html_source, resolver, TTLCache(60, clock=clock))


class TestCacheKey:
    def test_shape(self):
        since = datetime(2025, 10, 16, tzinfo=timezone.utc)
        assert response_cache_key(True, since, "southwest") == (
            "incidents:geocode=true:since=2025-10-16T00:00:00+00:00:station=southwest"
        )
        assert response_cache_key(False, None, None) == "incidents:geocode=false:since=all:station=all"


class TestScrapeIncidents:
    async def test_feed_path(self, orchestrator, client, html_source, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]

        items = await orchestrator.scrape_incidents()

        assert len(items) == 1
        html_source.fetch_incidents.assert_not_awaited()

    async def test_feed_arguments(self, client, html_source, resolver, clock, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]
        orchestrator = IngestionOrchestrator(client, html_source, resolver, TTLCache(60, clock=clock),
                                             max_pages=4, page_size=250)
        since = datetime(2025, 10, 16, tzinfo=timezone.utc)

        await orchestrator.scrape_incidents(since=since, station="southwest")

        client.fetch_incidents_until.assert_awaited_once_with(since, max_pages=4, page_size=250,
                                                              station="southwest")

    async def test_naive_since_is_pacific(self, orchestrator, client, html_source, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]

        await orchestrator.scrape_incidents(since=datetime(2025, 10, 16, 12, 0))

        html_source.fetch_incidents.assert_not_awaited()
        since = client.fetch_incidents_until.await_args.args[0]
        assert since == datetime(2025, 10, 16, 19, 0, tzinfo=timezone.utc)
        assert orchestrator.response_cache.get(response_cache_key(False, since, None)) is not None

    async def test_cache_hit_does_no_io(self, orchestrator, client, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]
        progress = Mock()

        first = await orchestrator.scrape_incidents()
        second = await orchestrator.scrape_incidents(on_progress=progress)

        assert second is first
        client.fetch_incidents_until.assert_awaited_once()
        progress.assert_not_called()

    async def test_cache_expires(self, orchestrator, client, clock, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]
        await orchestrator.scrape_incidents()
        clock.advance(61)
        await orchestrator.scrape_incidents()
        assert client.fetch_incidents_until.await_count == 2

    async def test_fallback_on_empty_feed(self, orchestrator, html_source, make_incident):
        html_source.fetch_incidents.return_value = [make_incident(incident_id="HTML1")]
        items = await orchestrator.scrape_incidents()
        assert [i.incident_id for i in items] == ["HTML1"]

    async def test_fallback_on_feed_error(self, orchestrator, client, html_source, make_incident):
        client.fetch_incidents_until.side_effect = UpstreamError("down")
        html_source.fetch_incidents.return_value = [make_incident(incident_id="HTML1")]
        items = await orchestrator.scrape_incidents()
        assert len(items) == 1

    async def test_fallback_exhausted_raises(self, orchestrator, html_source):
        html_source.fetch_incidents.side_effect = IngestionError("no mirrors")
        with pytest.raises(IngestionError):
            await orchestrator.scrape_incidents()

    async def test_geocoding_attaches_results(self, orchestrator, client, resolver, make_incident):
        incidents = [
            make_incident(incident_id="A", address="100 MAIN ST", station="desert"),
            make_incident(incident_id="B", address=None),
            make_incident(incident_id="C", address="undefined"),
            make_incident(incident_id="D", address="200 OAK ST", area="PERRIS"),
        ]
        client.fetch_incidents_until.return_value = incidents

        items = await orchestrator.scrape_incidents(geocode=True, station="southwest")

        located = {i.incident_id: (i.lat, i.lon, i.location_approximate) for i in items}
        assert located["A"] == (33.6, -117.3, True)
        assert located["D"] == (33.6, -117.3, True)
        assert located["B"] == (None, None, False)
        assert located["C"] == (None, None, False)
        calls = [c.args + (c.kwargs["station"],) for c in resolver.geocode_one.await_args_list]
        assert sorted(calls) == [("100 MAIN ST", "LAKE ELSINORE", "southwest"), ("200 OAK ST", "PERRIS", "southwest")]

    async def test_geocoding_uses_record_station(self, orchestrator, client, resolver, make_incident):
        client.fetch_incidents_until.return_value = [make_incident(station="desert")]
        await orchestrator.scrape_incidents(geocode=True)
        assert resolver.geocode_one.await_args.kwargs["station"] == "desert"

    async def test_max_geocode_caps_candidates(self, orchestrator, client, resolver, make_incident):
        client.fetch_incidents_until.return_value = [make_incident(incident_id=str(n)) for n in range(5)]

        items = await orchestrator.scrape_incidents(geocode=True, max_geocode=2)

        assert resolver.geocode_one.await_count == 2
        assert [i.lat is not None for i in items] == [True, True, False, False, False]

    async def test_geocode_failures_do_not_abort(self, orchestrator, client, resolver, make_incident, success):
        resolver.geocode_one.side_effect = [
            GeocodeFailure(error="all providers failed"),
            RuntimeError("unexpected"),
            success(),
        ]
        client.fetch_incidents_until.return_value = [make_incident(incident_id=str(n)) for n in range(3)]

        items = await orchestrator.scrape_incidents(geocode=True, geocode_concurrency=1)

        assert [i.lat is not None for i in items] == [False, False, True]
        assert orchestrator.response_cache.get(response_cache_key(True, None, None)) is items

    async def test_progress_sync_callback(self, orchestrator, client, make_incident):
        client.fetch_incidents_until.return_value = [make_incident(incident_id=str(n)) for n in range(3)]
        events = []

        await orchestrator.scrape_incidents(geocode=True, on_progress=lambda *a: events.append(a))

        assert events[0] == ("Geocoding", 0, 3)
        assert sorted(e[1] for e in events[1:]) == [1, 2, 3]
        assert all(e[2] == 3 for e in events)

    async def test_progress_async_callback(self, orchestrator, client, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]
        progress = AsyncMock()

        await orchestrator.scrape_incidents(geocode=True, on_progress=progress)

        assert [c.args for c in progress.await_args_list] == [("Geocoding", 0, 1), ("Geocoding", 1, 1)]

    async def test_no_geocode_no_progress(self, orchestrator, client, resolver, make_incident):
        client.fetch_incidents_until.return_value = [make_incident()]
        progress = Mock()
        await orchestrator.scrape_incidents(geocode=False, on_progress=progress)
        resolver.geocode_one.assert_not_awaited()
        progress.assert_not_called()
