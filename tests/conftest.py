import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="eventadmin-tests-")
os.environ.setdefault("EVENTADMIN_DB_URL", f"sqlite:///{_TMP_DIR}/eventadmin.db")
os.environ.setdefault("EVENTADMIN_API_KEY_PEPPER", "test-pepper-value")
os.environ.setdefault("EVENTADMIN_LOCAL_MEDIA_DIR", os.path.join(_TMP_DIR, "media"))

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.db import build_engine, init_db  # noqa: E402
from app.models.events import Event  # noqa: E402
from app.repositories import EventRepository  # noqa: E402
from app.stores import SqlDocumentStore  # noqa: E402

FIXED_NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sql_store(tmp_path) -> SqlDocumentStore:
    engine = build_engine(f"sqlite:///{tmp_path}/store.db")
    init_db(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return SqlDocumentStore(factory)


@pytest.fixture
def repository(sql_store, fixed_now) -> EventRepository:
    return EventRepository(sql_store, clock=lambda: fixed_now)


@pytest.fixture
def make_event():
    def _make(**overrides) -> Event:
        data = {
            "name": "Jazz Night",
            "description": "An evening of live jazz music",
            "category": "MUSICAL",
            "date": datetime(2030, 7, 1, tzinfo=timezone.utc),
            "time": "19:30",
            "location": "Blue Hall",
            "organizer": "City Arts",
            "contact_email": "info@example.com",
            "contact_phone": "+1 555 123 4567",
        }
        data.update(overrides)
        return Event(**data)

    return _make
