"""
Unit tests for search result parsing and match selection.
"""

import pytest
from unittest.mock import Mock
from urllib.parse import unquote

from disc_specs.core.errors import NoMatchError
from disc_specs.dtos.scrape_job_dto import SearchCandidate
from disc_specs.services.search_service import (
    SearchService,
    parse_search_results,
    select_best_match,
)


class TestParseSearchResults:
    def test_parses_candidates_in_page_order(self, search_html):
        candidates = parse_search_results(search_html)

        assert [c.url for c in candidates] == [
            "https://www.blu-ray.com/movies/Dune-4K-Blu-ray/297148/",
            "https://www.blu-ray.com/movies/Dune-Blu-ray/297149/",
            "https://www.blu-ray.com/movies/Dune-4K-Blu-ray/12345/",
        ]
        assert [c.year for c in candidates] == [2021, 2021, 1984]
        assert all(c.title == "Dune" for c in candidates)

    def test_capped_at_limit(self):
        html = "\n".join(
            f'<a href="/movies/Film-{i}/{i}/"><b>Film {i}</b> ({2000 + i})</a>' for i in range(8)
        )
        assert len(parse_search_results(html)) == 5
        assert len(parse_search_results(html, limit=2)) == 2

    def test_duplicate_urls_collapsed(self):
        html = (
            '<a href="/movies/Alien/1/"><b>Alien</b> (1979)</a>\n'
            '<a href="/movies/Alien/1/"><b>Alien</b> (1979)</a>\n'
        )
        assert len(parse_search_results(html)) == 1

    def test_falls_back_to_later_patterns(self):
        html = '<a href="/movies/Heat-Blu-ray/42/"><span>Heat</span> (1995)</a>'
        candidates = parse_search_results(html)

        assert candidates == [
            SearchCandidate(url="https://www.blu-ray.com/movies/Heat-Blu-ray/42/", title="Heat", year=1995)
        ]

    def test_no_results(self):
        assert parse_search_results("<html><body>No results</body></html>") == []


class TestSelectBestMatch:
    @pytest.fixture
    def dune_candidates(self, search_html):
        return parse_search_results(search_html)

    def test_year_within_one(self, dune_candidates):
        best = select_best_match(dune_candidates, "Dune", 1985)
        assert best.year == 1984

    def test_year_prefers_first_close_candidate(self, dune_candidates):
        best = select_best_match(dune_candidates, "Dune", 2021)
        assert best.url.endswith("/297148/")

    def test_title_match_when_no_year_is_close(self):
        candidates = [
            SearchCandidate(url="https://www.blu-ray.com/movies/Blade-Runner-2049/1/",
                            title="Blade Runner 2049", year=2017),
            SearchCandidate(url="https://www.blu-ray.com/movies/Dune/2/", title="Dune", year=1984),
        ]
        assert select_best_match(candidates, "Dune", 2021) == candidates[1]

    def test_first_when_neither_year_nor_title_matches(self):
        candidates = [
            SearchCandidate(url="https://www.blu-ray.com/movies/Arrival/1/", title="Arrival", year=2016),
            SearchCandidate(url="https://www.blu-ray.com/movies/Heat/2/", title="Heat", year=1995),
        ]
        assert select_best_match(candidates, "Dune", 2021) == candidates[0]

    def test_title_match_without_year(self):
        candidates = [
            SearchCandidate(url="https://www.blu-ray.com/movies/A/1/", title="Arrival", year=2016),
            SearchCandidate(url="https://www.blu-ray.com/movies/B/2/", title="Blade Runner 2049", year=2017),
        ]
        best = select_best_match(candidates, "blade runner")
        assert best.title == "Blade Runner 2049"

    def test_exact_year_candidate_beats_sequel(self):
        candidates = [
            SearchCandidate(url="https://www.blu-ray.com/movies/Dune/1/", title="Dune", year=2021),
            SearchCandidate(url="https://www.blu-ray.com/movies/Dune-Part-Two/2/",
                            title="Dune: Part Two", year=2024),
        ]
        assert select_best_match(candidates, "Dune", 2021) == candidates[0]

    def test_single_candidate_always_returned(self):
        only = SearchCandidate(url="https://www.blu-ray.com/movies/X/1/", title="Other", year=1900)
        assert select_best_match([only], "Dune", 2021) == only
        assert select_best_match([only], "Dune") == only

    def test_empty_raises(self):
        with pytest.raises(NoMatchError, match="No results"):
            select_best_match([], "Dune", 2021)


class TestSearchService:
    @pytest.mark.asyncio
    async def test_search_builds_query_and_parses(self, search_html):
        fetcher = Mock(return_value=search_html)
        service = SearchService(fetcher)

        candidates = await service.search("Dune", 2021)

        assert len(candidates) == 3
        url = fetcher.call_args[0][0]
        assert "section=bluraymovies" in url
        assert "quicksearch_keyword=Dune%202021" in url
        assert unquote(url).endswith("Dune 2021&section=bluraymovies")

    @pytest.mark.asyncio
    async def test_explicit_query_overrides_title_and_year(self, search_html):
        fetcher = Mock(return_value=search_html)
        service = SearchService(fetcher)

        await service.search("Dune", 2021, query="Dune Part One")

        assert "quicksearch_keyword=Dune%20Part%20One&" in fetcher.call_args[0][0]
