"""
Unit tests for scrape job repository.
"""

import pytest
from datetime import datetime, timedelta

from disc_specs.dtos.scrape_job_dto import ScrapeJobCreate
from disc_specs.entities.base import utcnow
from disc_specs.repositories.scrape_job_repo import ScrapeJobRepository

NOW = datetime(2026, 3, 1, 9, 0, 0)


@pytest.fixture
def scrape_job_repo(db_session):
    """Create scrape job repository with test session."""
    return ScrapeJobRepository(db_session)


def _create(repo, title="Dune", year=2021, **kwargs):
    return repo.create_job(ScrapeJobCreate(title=title, year=year, **kwargs),
                           search_query=f"{title} {year}")


class TestScrapeJobRepository:
    """Test scrape job repository functionality."""

    def test_create_job(self, scrape_job_repo):
        job = _create(scrape_job_repo)

        assert job.id is not None
        assert job.status == "pending"
        assert job.attempts == 0
        assert job.max_attempts == 3
        assert job.search_query == "Dune 2021"
        assert job.created_at is not None

    def test_find_active_job(self, scrape_job_repo):
        job = _create(scrape_job_repo)

        assert scrape_job_repo.find_active_job("Dune", 2021).id == job.id
        assert scrape_job_repo.find_active_job("Dune", 1984) is None

        scrape_job_repo.mark_completed(job.id, None, NOW)
        assert scrape_job_repo.find_active_job("Dune", 2021) is None

    def test_find_active_job_without_year(self, scrape_job_repo):
        job = _create(scrape_job_repo, title="Heat", year=None)

        assert scrape_job_repo.find_active_job("Heat", None).id == job.id

    def test_claim_batch_order_and_attempts(self, scrape_job_repo):
        low = _create(scrape_job_repo, title="A")
        high = _create(scrape_job_repo, title="B", priority=5)
        _create(scrape_job_repo, title="C")

        claimed = scrape_job_repo.claim_batch(2, NOW)

        assert [job.id for job in claimed] == [high.id, low.id]
        assert all(job.status == "processing" for job in claimed)
        assert all(job.attempts == 1 for job in claimed)
        assert all(job.started_at == NOW for job in claimed)

    def test_claim_skips_jobs_waiting_for_retry(self, scrape_job_repo):
        job = _create(scrape_job_repo)
        scrape_job_repo.claim_batch(3, NOW)
        scrape_job_repo.schedule_retry(job.id, NOW + timedelta(minutes=2), "boom", NOW)

        assert scrape_job_repo.claim_batch(3, NOW + timedelta(minutes=1)) == []

        claimed = scrape_job_repo.claim_batch(3, NOW + timedelta(minutes=3))
        assert [j.id for j in claimed] == [job.id]
        assert claimed[0].attempts == 2

    def test_mark_processing_only_once(self, scrape_job_repo):
        job = _create(scrape_job_repo)

        assert scrape_job_repo.mark_processing(job.id, NOW) is True
        assert scrape_job_repo.mark_processing(job.id, NOW) is False
        assert scrape_job_repo.get_by_id(job.id).attempts == 1

    def test_mark_completed(self, scrape_job_repo):
        job = _create(scrape_job_repo)

        updated = scrape_job_repo.mark_completed(job.id, 42, NOW)

        assert updated.status == "completed"
        assert updated.technical_specs_id == 42
        assert updated.completed_at == NOW

    def test_mark_failed(self, scrape_job_repo):
        job = _create(scrape_job_repo)

        updated = scrape_job_repo.mark_failed(job.id, "gone", NOW)

        assert updated.status == "failed"
        assert updated.error_message == "gone"
        assert scrape_job_repo.claim_batch(3, NOW + timedelta(days=1)) == []

    def test_updates_on_missing_job(self, scrape_job_repo):
        assert scrape_job_repo.mark_completed(999, None, NOW) is None
        assert scrape_job_repo.mark_failed(999, "x", NOW) is None
        assert scrape_job_repo.schedule_retry(999, NOW, "x", NOW) is None

    def test_get_jobs_by_status(self, scrape_job_repo):
        first = _create(scrape_job_repo, title="A")
        _create(scrape_job_repo, title="B")
        scrape_job_repo.mark_failed(first.id, "x", NOW)

        failed = scrape_job_repo.get_jobs_by_status("failed")

        assert [job.id for job in failed] == [first.id]
        assert len(scrape_job_repo.get_all_jobs()) == 2

    def test_latest_for_collection_item(self, scrape_job_repo):
        _create(scrape_job_repo, title="A", collection_item_id=9)
        newer = _create(scrape_job_repo, title="B", collection_item_id=9)

        assert scrape_job_repo.get_latest_for_collection_item(9).id == newer.id
        assert scrape_job_repo.get_latest_for_collection_item(10) is None

    def test_count_by_status(self, scrape_job_repo):
        a = _create(scrape_job_repo, title="A")
        _create(scrape_job_repo, title="B")
        scrape_job_repo.mark_failed(a.id, "x", NOW)

        assert scrape_job_repo.count_by_status() == {"pending": 1, "failed": 1}
        future = utcnow() + timedelta(days=1)
        assert scrape_job_repo.count_by_status(since=future) == {}
