"""
tests/conftest.py
=================
Shared pytest fixtures: in-memory SQLite, uploads under tmp_path, no
production database or upload directory touched.
"""
import io
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from voyage.auth.dependencies import ADMIN, SUPER_ADMIN
from voyage.auth.utils import create_access_token
from voyage.database import Base, get_db
from voyage.main import app
from voyage.models import Agency, Booking, Branch, Client, User
from voyage.uploads import StagingArea, UploadStorage, get_upload_storage


# ─── Database ────────────────────────────────────────────────────────────────

@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# ─── Uploads ─────────────────────────────────────────────────────────────────

@pytest.fixture
def storage(tmp_path):
    return UploadStorage(
        root=str(tmp_path / "uploads"),
        staging_root=str(tmp_path / "staging"),
        public_prefix="uploads",
    )


def upload_file(filename, content, mime):
    return UploadFile(file=io.BytesIO(content), filename=filename, headers=Headers({"content-type": mime}))


@pytest.fixture
def make_staging(storage):
    """Staging area that received {field: (filename, bytes, mime)}"""
    def _f(files=None):
        area = StagingArea(storage)
        for field_name, (filename, content, mime) in (files or {}).items():
            area.receive(field_name, upload_file(filename, content, mime))
        return area
    return _f


# ─── API client ──────────────────────────────────────────────────────────────

@pytest.fixture
def api(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_upload_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "agency_id": user.agency_id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


# ─── Model factories ─────────────────────────────────────────────────────────

@pytest.fixture
def make_agency(db_session):
    _n = [0]
    def _f(**kw):
        _n[0] += 1
        agency = Agency(
            business_name=kw.pop("business_name", f"Agency {_n[0]}"),
            address_line1="1 Main Street",
            contact_person_name="Owner",
            contact_person_email=kw.pop("contact_person_email", f"owner{_n[0]}@agency.com"),
            contact_person_phone="9800000000",
            **kw,
        )
        agency.branches.append(Branch(branch_name="Head Office"))
        db_session.add(agency)
        db_session.commit()
        return agency
    return _f


@pytest.fixture
def make_user(db_session):
    _n = [0]
    def _f(agency=None, role="user", **kw):
        _n[0] += 1
        user = User(
            name=f"User {_n[0]}",
            email=kw.pop("email", f"user{_n[0]}@example.com"),
            password=kw.pop("password", "not-a-real-hash"),
            role=role,
            agency_id=agency.id if agency else None,
            branch_id=agency.branches[0].id if agency and agency.branches else None,
            **kw,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _f


@pytest.fixture
def make_client(db_session):
    _n = [0]
    def _f(agency, **kw):
        _n[0] += 1
        client = Client(agency_id=agency.id, client_name=kw.pop("client_name", f"Client {_n[0]}"), **kw)
        db_session.add(client)
        db_session.commit()
        return client
    return _f


@pytest.fixture
def make_booking(db_session, make_client):
    _n = [0]
    def _f(agency, booking_number=None, **kw):
        _n[0] += 1
        client = kw.pop("client", None) or make_client(agency)
        booking = Booking(
            agency_id=agency.id,
            client_id=client.id,
            booking_number=booking_number or f"LEGACY/{_n[0]}",
            **kw,
        )
        db_session.add(booking)
        db_session.commit()
        return booking
    return _f


@pytest.fixture
def super_admin(make_user):
    return make_user(role=SUPER_ADMIN)


@pytest.fixture
def agency(make_agency):
    return make_agency()


@pytest.fixture
def agency_user(make_user, agency):
    """Regular agency staff; books for their own branch"""
    return make_user(agency=agency)


@pytest.fixture
def agency_admin(make_user, agency):
    return make_user(agency=agency, role=ADMIN)


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def make_upload():
    return upload_file
