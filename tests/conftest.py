import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from gymdash.app import create_app
from gymdash.auth.models import Credential, PublicUser, SessionRecord
from gymdash.auth.passwords import hash_password
from gymdash.config import Settings
from gymdash.core.errors import EmailAlreadyRegistered


class FakeClock:
    """Controllable 'now' for expiry tests. Starts at the real current time
    so cookies issued through TestClient are not dropped by the client jar."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryCredentialStore:
    def __init__(self):
        self.rows: Dict[int, Credential] = {}
        self._next_id = 1

    async def get_by_email(self, email: str) -> Optional[Credential]:
        return next((c for c in self.rows.values() if c.email == email), None)

    async def get_by_id(self, user_id: int) -> Optional[Credential]:
        return self.rows.get(user_id)

    async def insert(self, email: str, password_hash: str, role: str, admin_id: Optional[int] = None) -> int:
        if any(c.email == email for c in self.rows.values()):
            raise EmailAlreadyRegistered(email)
        user_id = self._next_id
        self._next_id += 1
        self.rows[user_id] = Credential(user_id, email, password_hash, role, admin_id)
        return user_id

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        c = self.rows[user_id]
        self.rows[user_id] = Credential(c.id, c.email, password_hash, c.role, c.admin_id)

    async def list_assistants(self, admin_id: int) -> List[PublicUser]:
        return [c.public() for c in self.rows.values() if c.role == "assistant" and c.admin_id == admin_id]

    async def delete_assistant(self, admin_id: int, user_id: int) -> bool:
        c = self.rows.get(user_id)
        if c and c.role == "assistant" and c.admin_id == admin_id:
            del self.rows[user_id]
            return True
        return False


class InMemorySessionStore:
    def __init__(self):
        self.rows: Dict[str, SessionRecord] = {}

    async def get(self, token: str) -> Optional[SessionRecord]:
        return self.rows.get(token)

    async def insert(self, record: SessionRecord) -> None:
        self.rows[record.token] = record

    async def delete(self, token: str) -> None:
        self.rows.pop(token, None)

    async def delete_expired(self, now: datetime) -> int:
        expired = [t for t, r in self.rows.items() if r.expires_at <= now]
        for t in expired:
            del self.rows[t]
        return len(expired)


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def seeded_credential(credentials) -> Credential:
    """a@x.com / secret, inserted synchronously into the in-memory store."""
    cred = Credential(id=1, email="a@x.com", password_hash=hash_password("secret"), role="admin")
    credentials.rows[cred.id] = cred
    credentials._next_id = 2
    return cred


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(db_path=str(tmp_path / "data" / "gym.db"), secret_key="test-secret")


@pytest.fixture()
def client(settings, clock):
    app = create_app(settings, clock=clock)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def admin_client(client):
    """Client logged in as a freshly signed-up admin a@x.com / secret."""
    r = client.post("/api/auth/signup", json={"email": "a@x.com", "password": "secret"})
    assert r.status_code == 201
    r = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret"})
    assert r.status_code == 200
    return client
