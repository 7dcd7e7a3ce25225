"""
End-to-end worker run against in-memory SQLite with a fake fetcher.
"""

import pytest
from unittest.mock import AsyncMock

from disc_specs.core.errors import FetchError
from disc_specs.core.rate_limiter import RateLimiter
from disc_specs.dtos.scrape_job_dto import ScrapeJobCreate
from disc_specs.entities.cached_page import CachedPage
from disc_specs.entities.collection_item import CollectionItem
from disc_specs.entities.disc_rating import DiscRating
from disc_specs.entities.technical_spec import TechnicalSpec
from disc_specs.services.scrape_worker_service import ScrapeWorkerService
from disc_specs.services.spec_request_service import SpecRequestService

DUNE_URL = "https://www.blu-ray.com/movies/Dune-4K-Blu-ray/297148/"


@pytest.fixture
def fake_fetcher(search_html, release_html):
    calls = []

    def fetch(url):
        calls.append(url)
        if "/search/" in url:
            return search_html
        if url == DUNE_URL:
            return release_html
        raise FetchError(url, status_code=404)

    fetch.calls = calls
    return fetch


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def worker(db_session, fake_fetcher, sleep):
    return ScrapeWorkerService(
        db_session,
        fetcher=fake_fetcher,
        rate_limiter=RateLimiter(22, 14, sleep=sleep),
    )


class TestWorkerPipeline:
    @pytest.mark.asyncio
    async def test_title_job_end_to_end(self, db_session, worker, fake_fetcher, sleep):
        item = CollectionItem(title="Dune", year=2021)
        db_session.add(item)
        db_session.commit()
        job = SpecRequestService(db_session).submit_job(
            ScrapeJobCreate(title="Dune", year=2021, collection_item_id=item.id)
        )

        summary = await worker.process_batch()

        assert summary.processed_count == 1
        assert summary.results[0].status == "completed"
        assert len(fake_fetcher.calls) == 2
        sleep.assert_awaited_once()

        spec = db_session.query(TechnicalSpec).one()
        assert spec.disc_format == "4K UHD"
        assert spec.data_quality == "complete"
        assert spec.audio_channels == ["7.1", "5.1"]

        rating = db_session.query(DiscRating).one()
        assert rating.overall == 4.6

        db_session.refresh(item)
        assert item.technical_specs_id == spec.id

        db_session.expire_all()
        assert db_session.get(type(job), job.id).status == "completed"
        assert db_session.query(CachedPage).count() == 1

    @pytest.mark.asyncio
    async def test_second_scrape_uses_cache(self, db_session, worker, fake_fetcher, sleep):
        requests = SpecRequestService(db_session)
        requests.submit_job(ScrapeJobCreate(title="Dune", year=2021, source_url=DUNE_URL))
        await worker.process_batch()

        requests.submit_job(ScrapeJobCreate(title="Dune", year=2021, source_url=DUNE_URL))
        summary = await worker.process_batch()

        assert summary.results[0].status == "completed"
        assert fake_fetcher.calls == [DUNE_URL]
        assert sleep.await_count == 1
        assert db_session.query(TechnicalSpec).count() == 1

    @pytest.mark.asyncio
    async def test_fetch_failure_is_retried(self, db_session, worker):
        job = SpecRequestService(db_session).submit_job(
            ScrapeJobCreate(title="Gone", source_url="https://www.blu-ray.com/movies/Gone/1/")
        )

        summary = await worker.process_batch()

        result = summary.results[0]
        assert result.status == "retrying"
        db_session.expire_all()
        stored = db_session.get(type(job), job.id)
        assert stored.status == "pending"
        assert stored.attempts == 1
        assert stored.retry_after is not None
        assert "404" in stored.error_message
