import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT_DIR = Path(__file__).resolve().parents[1]
PROJECT_ROOT = ROOT_DIR.parent
for path in (PROJECT_ROOT, ROOT_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Keep the module-level engine away from the developer database
os.environ.setdefault("SQLITE_PATH", str(Path(tempfile.mkdtemp(prefix="churchbuddy-")) / "default.db"))

from app import app as backend_app
from database import get_db, init_database
from services.storage.app import app as storage_app
from shared.models import Slide
from shared.utils import config as service_config

SERVICE_APPS = [storage_app, backend_app]

DEFAULT_PRESENTATION_CONFIG: dict[str, Any] = {
    "sync": {"debounce_seconds": 1.0, "single_slide_fallback": True},
    "autoplay": {"default_interval_seconds": 10, "loop": True},
}


@pytest.fixture
def session_factory(tmp_path: Path) -> Callable[[], Generator]:
    """Create a fresh SQLite database per test."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    init_database(bind=engine)

    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _session_generator() -> Generator:
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    yield _session_generator
    engine.dispose()


@pytest.fixture(autouse=True)
def test_environment(session_factory: Callable[[], Generator]) -> Generator:
    """Dependency overrides and a known presentation config per-test."""
    original_presentation = service_config.presentation_config
    service_config.set_presentation_config(DEFAULT_PRESENTATION_CONFIG)

    def _get_test_db():
        yield from session_factory()

    for service_app in SERVICE_APPS:
        service_app.dependency_overrides[get_db] = _get_test_db

    try:
        yield
    finally:
        for service_app in SERVICE_APPS:
            service_app.dependency_overrides.pop(get_db, None)
        service_config.set_presentation_config(original_presentation)


@pytest.fixture
def make_slide() -> Callable[..., Slide]:
    def _make(slide_id: str, order: int = 1, html: str = "<div>text</div>") -> Slide:
        return Slide(id=slide_id, title=f"Slide {order}", html=html, order=order)

    return _make
