"""
Pytest fixtures for the listing post composer.

Config is read at import time, so the environment is pinned before any
project module is imported.
"""
import os
import tempfile

import pytest

os.environ['FLASK_ENV'] = 'testing'
os.environ['APP_STAGE'] = 'test'
os.environ['SECRET_KEY'] = 'test-secret-key'
os.environ['STYLE_STORE_BACKEND'] = 'memory'
os.environ['REQUIRE_FONTS'] = 'false'
os.environ.setdefault('INSTANCE_DIR', tempfile.mkdtemp(prefix='composer-test-'))

from models import PropertyRecord, UserPreferences, CanvasStyle  # noqa: E402
from services.style_store import InMemoryStyleStore  # noqa: E402


@pytest.fixture
def sample_property():
    return PropertyRecord(
        address_line="123 Main St",
        city="Austin",
        state_or_region="TX",
        postal_code="78701",
        beds=3,
        baths=2,
        square_feet=1980,
        price="525000",
    )


@pytest.fixture
def sample_prefs():
    return UserPreferences(
        brokerage_logo_url="https://cdn.example.com/logo.png",
        realtor_picture_url="https://cdn.example.com/headshot.png",
        brokerage_logo_size=(800, 200),
        realtor_picture_size=(600, 600),
    )


@pytest.fixture
def default_style():
    return CanvasStyle()


@pytest.fixture
def memory_store():
    return InMemoryStyleStore()


class FailingStore(InMemoryStyleStore):
    """Store whose saves fail while `failing` is set."""

    def __init__(self):
        super().__init__()
        self.failing = True
        self.saves = 0

    def save(self, post_id, doc):
        from services.style_store import PersistenceFailure
        self.saves += 1
        if self.failing:
            raise PersistenceFailure("disk full", post_id=post_id)
        super().save(post_id, doc)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def render_service(tmp_path):
    from services.render_service import RenderService
    from services.templates.fonts import FontProvider
    fonts = FontProvider(str(tmp_path / "fonts"))
    fonts.register_fonts()
    return RenderService(fonts=fonts, loader_factory=None, require_fonts=False, width=390)


@pytest.fixture
def app(memory_store, render_service):
    from app import create_app
    flask_app = create_app({
        'TESTING': True,
        'RATELIMIT_ENABLED': False,
        'STYLE_STORE': memory_store,
        'RENDER_SERVICE': render_service,
    })
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
