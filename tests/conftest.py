import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from playawards import create_app, db  # noqa: E402
from playawards.entities import HistoryEntry, Item  # noqa: E402


@pytest.fixture
def app_instance(tmp_path):
    database_file = tmp_path / "test.db"
    app = create_app(database_uri=f"sqlite:///{database_file}", AWARDS_AI_ENDPOINT=None)
    app.config.update(TESTING=True)

    with app.app_context():
        db.drop_all()
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture
def make_item():
    def _make_item(name, logs=(), **kwargs):
        history = tuple(
            HistoryEntry(day=date.fromisoformat(day), hours=hours) for day, hours in logs
        )
        kwargs.setdefault("id", name)
        return Item(name=name, history=history, **kwargs)

    return _make_item
