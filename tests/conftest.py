"""
Shared test fixtures for disc-specs.

Provides:
- db_session: In-memory SQLite session with all tables created
- client: FastAPI TestClient with DB dependency override
- release_html / search_html: trimmed copies of blu-ray.com pages
"""

import os

# Force sqlite for tests — must be set before any disc_specs imports.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("API_KEY", "")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from disc_specs.entities.base import Base

# Import ALL entity modules so Base.metadata.create_all() registers them.
import disc_specs.entities.scrape_job  # noqa: F401
import disc_specs.entities.technical_spec  # noqa: F401
import disc_specs.entities.disc_rating  # noqa: F401
import disc_specs.entities.cached_page  # noqa: F401
import disc_specs.entities.collection_item  # noqa: F401

DUNE_4K_URL = "https://www.blu-ray.com/movies/Dune-4K-Blu-ray/297148/"

RELEASE_HTML = """<html><head><title>Dune 4K Blu-ray</title></head>
<body>
<img id="frontimage_overlay" src="https://images.static-bluray.com/movies/covers/297148_front.jpg" alt="Dune 4K cover" />
<span id="runtime">Runtime: 155 min</span>
Studio: <a href="https://www.blu-ray.com/studios/1/">Warner Bros.</a><br>
<h3>Reviews</h3>
<table><tr><td>Overall</td><td>1.0</td></tr></table>
<span class="subheading">Video</span><br>Codec: HEVC / H.265 (62.3 Mbps)<br>Resolution: Native 4K (2160p)<br>HDR: Dolby Vision, HDR10<br>Aspect ratio: 2.39:1<br>Original aspect ratio: 2.39:1<br><br>
<span class="subheading">Audio</span><br><div id="shortaudio">English: Dolby Atmos<br>English: Dolby TrueHD 7.1<br>French: Dolby Digital 5.1<br></div><br><br>
<span class="subheading">Subtitles</span><br><div id="shortsubs">English SDH, French, Spanish</div><br><br>
<span class="subheading">Discs</span><br>4K Ultra HD<br>Blu-ray Disc<br>Two-disc set (1 BD-100, 1 BD-50)<br><br>
<span class="subheading">Digital</span><br>Digital copy included<br><br>
<span class="subheading">Packaging</span><br>Slipcover in original pressing<br>Eco-friendly case<br><br>
<span class="subheading">Playback</span><br>4K Blu-ray: Region free<br>Blu-ray: Region A (B, C untested)<br><br>
<h3>Blu-ray user rating</h3>
<table>
<tr><td>4K</td><td>4.8</td></tr>
<tr><td>Video</td><td>4.5</td></tr>
<tr><td>Audio</td><td>4.9</td></tr>
<tr><td>Extras</td><td>3.2</td></tr>
<tr><td>Overall</td><td>4.6</td></tr>
</table>
<div>Based on 120 user ratings</div>
</body></html>
"""

SEARCH_HTML = """<html><body>
<a href="/movies/Dune-4K-Blu-ray/297148/" title="Dune"><b>Dune</b> 4K (2021)</a>
<a href="/movies/Dune-Blu-ray/297149/"><b>Dune</b> (2021)</a>
<a href="/movies/Dune-4K-Blu-ray/12345/"><b>Dune</b> 4K (1984)</a>
</body></html>
"""


@pytest.fixture
def release_html() -> str:
    return RELEASE_HTML


@pytest.fixture
def search_html() -> str:
    return SEARCH_HTML


@pytest.fixture
def db_session():
    """In-memory SQLite for unit tests. Never hits production DB."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestSession = sessionmaker(bind=engine)
    session = TestSession()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def client(db_session: Session):
    """FastAPI TestClient with DB dependency overridden to use in-memory SQLite."""
    from fastapi.testclient import TestClient
    from disc_specs.core.database import get_db
    from disc_specs.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc
    app.dependency_overrides.clear()
