"""
Unit tests for source-site URL handling.
"""

import pytest

from disc_specs.core.errors import InvalidSourceUrlError
from disc_specs.core.source_urls import (
    absolutize,
    build_search_query,
    build_search_url,
    canonicalize_source_url,
    disc_format_from_url,
    is_source_url,
)


class TestSourceUrls:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.blu-ray.com/movies/Dune-4K-Blu-ray/297148/",
            "http://blu-ray.com/movies/Dune-4K-Blu-ray/297148/",
        ],
    )
    def test_accepts_source_hosts(self, url):
        assert is_source_url(url)

    @pytest.mark.parametrize(
        "url",
        [None, "", "not a url", "ftp://www.blu-ray.com/x", "https://evil-blu-ray.com/movies/X/1/",
         "https://www.blu-ray.com.evil.net/movies/X/1/"],
    )
    def test_rejects_other_urls(self, url):
        assert not is_source_url(url)

    def test_canonical_form(self):
        assert canonicalize_source_url(
            "http://blu-ray.com/movies/Dune-4K-Blu-ray/297148?ref=x#top"
        ) == "https://www.blu-ray.com/movies/Dune-4K-Blu-ray/297148/"

    def test_canonicalize_rejects_foreign_url(self):
        with pytest.raises(InvalidSourceUrlError, match="must be from blu-ray.com"):
            canonicalize_source_url("https://www.imdb.com/title/tt1160419/")

    def test_absolutize(self):
        assert absolutize("/movies/Heat/1/") == "https://www.blu-ray.com/movies/Heat/1/"

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.blu-ray.com/movies/Dune-4K-Blu-ray/297148/", "4K UHD"),
            ("https://www.blu-ray.com/movies/Avatar-UHD-Blu-ray/1/", "4K UHD"),
            ("https://www.blu-ray.com/movies/Avatar-3D-Blu-ray/2/", "3D Blu-ray"),
            ("https://www.blu-ray.com/movies/Heat-DVD/3/", "DVD"),
            ("https://www.blu-ray.com/movies/Heat-Blu-ray/4/", "Blu-ray"),
            ("https://www.blu-ray.com/movies/Heat/5/", None),
        ],
    )
    def test_disc_format_from_url(self, url, expected):
        assert disc_format_from_url(url) == expected

    def test_search_query(self):
        assert build_search_query("Dune", 2021) == "Dune 2021"
        assert build_search_query("Dune") == "Dune"

    def test_search_url(self):
        url = build_search_url("Amélie & Co 2001")
        assert url.startswith("https://www.blu-ray.com/search/?quicksearch=1")
        assert "quicksearch_country=US" in url
        assert "quicksearch_keyword=Am%C3%A9lie%20%26%20Co%202001" in url
        assert url.endswith("&section=bluraymovies")
