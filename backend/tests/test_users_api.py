import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import db
from app.core.security import pwd
from app.db.base import Base
from app.main import app
from app.models.user import User
from app.seed import seed_admin


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def SessionLocal(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def client(SessionLocal):
    def _db():
        s = SessionLocal()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[db] = _db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _create(client, name="Ann", email="a@x.com", password="secret1", **extra):
    return client.post("/users", json={"name": name, "email": email, "password": password, **extra})


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/api/health").status_code == 200


def test_create_returns_201_without_credentials(client, SessionLocal):
    r = _create(client)
    assert r.status_code == 201
    body = r.json()
    assert set(body) == {"id", "name", "email", "role", "created_at", "updated_at"}
    assert body["role"] == "CUSTOMER"

    with SessionLocal() as s:
        row = s.get(User, body["id"])
        assert row.password_hash != "secret1"
        assert pwd.verify("secret1", row.password_hash)


def test_create_validation_errors(client):
    r = client.post("/users", json={"name": "Ann", "email": "a@x.com"})
    assert r.status_code == 400
    assert r.json() == {"detail": "Name, email, and password are required"}

    r = _create(client, email="no-at-sign")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid email format"


def test_duplicate_email_conflict_keeps_single_row(client, SessionLocal):
    assert _create(client).status_code == 201
    r = _create(client, name="Bob")
    assert r.status_code == 409
    assert r.json()["detail"] == "Email already in use"

    with SessionLocal() as s:
        rows = s.execute(select(User).where(User.email == "a@x.com")).scalars().all()
        assert len(rows) == 1
        assert rows[0].name == "Ann"


def test_list_is_ordered_by_id(client):
    ids = [_create(client, email=f"u{i}@x.com").json()["id"] for i in range(3)]
    r = client.get("/users")
    assert r.status_code == 200
    assert [u["id"] for u in r.json()] == sorted(ids)
    assert all("password_hash" not in u for u in r.json())


def test_get_by_id(client):
    uid = _create(client).json()["id"]
    assert client.get(f"/users/{uid}").json()["email"] == "a@x.com"

    r = client.get("/users/9999")
    assert r.status_code == 404
    assert r.json()["detail"] == "User not found"

    r = client.get("/users/abc")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid user id"


def test_patch_name_only(client, SessionLocal):
    uid = _create(client, role="ADMIN").json()["id"]
    with SessionLocal() as s:
        old_hash = s.get(User, uid).password_hash

    r = client.patch(f"/users/{uid}", json={"name": "Renamed"})
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Renamed"
    assert body["email"] == "a@x.com"
    assert body["role"] == "ADMIN"

    with SessionLocal() as s:
        assert s.get(User, uid).password_hash == old_hash


def test_put_behaves_like_patch(client):
    uid = _create(client).json()["id"]
    r = client.put(f"/users/{uid}", json={"role": "ADMIN"})
    assert r.status_code == 200
    assert r.json()["role"] == "ADMIN"
    assert r.json()["name"] == "Ann"


def test_update_null_fields_are_ignored(client):
    uid = _create(client).json()["id"]
    r = client.patch(f"/users/{uid}", json={"name": None, "email": None, "password": None})
    assert r.status_code == 200
    assert r.json()["name"] == "Ann"


def test_update_failures(client, SessionLocal):
    a = _create(client).json()["id"]
    b = _create(client, name="Bob", email="b@x.com").json()["id"]
    with SessionLocal() as s:
        old_hash = s.get(User, a).password_hash

    r = client.patch(f"/users/{a}", json={"password": "short"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Password must be at least 6 characters"
    with SessionLocal() as s:
        assert s.get(User, a).password_hash == old_hash

    assert client.patch(f"/users/{a}", json={"email": "bad"}).status_code == 400
    assert client.patch(f"/users/{b}", json={"email": "a@x.com"}).status_code == 409
    assert client.patch("/users/9999", json={"name": "X"}).status_code == 404
    assert client.patch("/users/x1", json={"name": "X"}).status_code == 400


def test_update_own_email_is_not_a_conflict(client):
    uid = _create(client).json()["id"]
    r = client.patch(f"/users/{uid}", json={"email": "a@x.com"})
    assert r.status_code == 200
    assert r.json()["email"] == "a@x.com"


def test_update_password_rehashes(client, SessionLocal):
    uid = _create(client).json()["id"]
    r = client.patch(f"/users/{uid}", json={"password": "brand-new"})
    assert r.status_code == 200
    with SessionLocal() as s:
        assert pwd.verify("brand-new", s.get(User, uid).password_hash)


def test_delete_then_delete_again(client):
    uid = _create(client).json()["id"]

    r = client.delete(f"/users/{uid}")
    assert r.status_code == 204
    assert r.content == b""

    for _ in range(2):
        r = client.delete(f"/users/{uid}")
        assert r.status_code == 404
    assert client.get(f"/users/{uid}").status_code == 404
    assert client.delete("/users/nope").status_code == 400


def test_seed_admin_is_idempotent(SessionLocal):
    with SessionLocal() as s:
        out = seed_admin(s, "Admin", "admin@x.com", "admin123")
        assert out.role == "ADMIN"
    with SessionLocal() as s:
        assert seed_admin(s, "Admin", "admin@x.com", "admin123") is None
        assert len(s.execute(select(User)).scalars().all()) == 1


@pytest.mark.parametrize("huge", ["99999999999999999999", "3000000000"])
def test_ids_beyond_column_range_are_not_found(client, huge):
    _create(client)
    assert client.get(f"/users/{huge}").status_code == 404
    assert client.patch(f"/users/{huge}", json={"name": "X"}).status_code == 404
    r = client.delete(f"/users/{huge}")
    assert r.status_code == 404
    assert r.json()["detail"] == "User not found"
