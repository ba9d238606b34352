"""Shared fakes and fixtures."""

import asyncio
import itertools
from collections import defaultdict
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from dating_api import deps
from dating_api.config import Settings
from dating_api.db.session import SessionStore
from dating_api.errors import DatabaseError, LoginFailed, SwipeRequestInvalid
from dating_api.main import app
from dating_api.models.profile_model import DiscoverProfile, Profile
from dating_api.models.swipe_model import Match, SwipeLedger
from dating_api.services.matcher import SwipeMatcher


# ============================================================================
# Ledger store
# ============================================================================

class InMemoryLedger:
    """One transaction against InMemoryLedgerStore.

    Rows are locked on read in id order and writes are staged until commit,
    mirroring SELECT ... FOR UPDATE inside a Postgres transaction.
    """

    def __init__(self, store: "InMemoryLedgerStore"):
        self.store = store
        self.held = []
        self.staged_ledgers = {}
        self.staged_matches = []

    async def load_ledger_pair(self, user_id1, user_id2):
        ids = sorted({user_id1, user_id2} & self.store.ledgers.keys())
        for user_id in ids:
            lock = self.store.locks[user_id]
            await lock.acquire()
            self.held.append(lock)
        if self.store.read_delay:
            await asyncio.sleep(self.store.read_delay)
        if len(ids) < 2:
            raise SwipeRequestInvalid()
        return {user_id: self.store.ledgers[user_id].model_copy(deep=True) for user_id in ids}

    async def persist_ledger(self, ledger):
        self.store.persist_calls.append(ledger.id)
        self.staged_ledgers[ledger.id] = ledger.model_copy(deep=True)

    async def create_match(self, user_id1, user_id2):
        if self.store.fail_create_match:
            raise DatabaseError()
        existing = self.store.matches_between(user_id1, user_id2)
        if existing:
            return existing[0]
        match = Match(id=next(self.store.match_ids), user1_id=user_id1, user2_id=user_id2)
        self.staged_matches.append(match)
        return match

    def commit(self):
        self.store.ledgers.update(self.staged_ledgers)
        self.store.matches.extend(self.staged_matches)
        self.store.commits += 1

    def release(self):
        for lock in self.held:
            lock.release()
        self.held = []


class InMemoryLedgerStore:
    def __init__(self):
        self.ledgers = {}
        self.matches = []
        self.locks = defaultdict(asyncio.Lock)
        self.match_ids = itertools.count(1)
        self.persist_calls = []
        self.read_delay = 0.0
        self.fail_create_match = False
        self.commits = 0
        self.rollbacks = 0

    def add_profile(self, user_id, swiped_on=(), swiped_yes_by=()):
        self.ledgers[user_id] = SwipeLedger(
            id=user_id, swiped_on=set(swiped_on), swiped_yes_by=set(swiped_yes_by)
        )

    def matches_between(self, user_id1, user_id2):
        pair = {user_id1, user_id2}
        return [m for m in self.matches if {m.user1_id, m.user2_id} == pair]

    @asynccontextmanager
    async def transaction(self):
        tx = InMemoryLedger(self)
        try:
            yield tx
        except BaseException:
            self.rollbacks += 1
            raise
        else:
            tx.commit()
        finally:
            tx.release()


# ============================================================================
# asyncpg stubs
# ============================================================================

class StubConnection:
    """Records queries; tests set return values or side effects per method."""

    def __init__(self):
        self.fetch = AsyncMock(return_value=[])
        self.fetchrow = AsyncMock()
        self.execute = AsyncMock()
        self.committed = False
        self.rolled_back = False

    @asynccontextmanager
    async def transaction(self):
        try:
            yield
        except BaseException:
            self.rolled_back = True
            raise
        self.committed = True


class StubPool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


# ============================================================================
# Collaborators
# ============================================================================

class FakeRedis:
    """The subset of redis.asyncio.Redis used by SessionStore."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.should_fail = False

    async def _roundtrip(self):
        # Each command yields to the loop like a network call would.
        await asyncio.sleep(0)
        if self.should_fail:
            raise RedisConnectionError("connection refused")

    async def get(self, key):
        await self._roundtrip()
        return self.data.get(key)

    async def set(self, key, value, ex=None, get=False):
        await self._roundtrip()
        previous = self.data.get(key)
        self.data[key] = value
        self.ttls[key] = ex
        return previous if get else True

    async def delete(self, *keys):
        await self._roundtrip()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed


class FakeProfileStore:
    def __init__(self):
        self.profiles = {}
        self.ids = itertools.count(1)

    async def create_profile(self, age, name, gender, email, password, location):
        profile = Profile(
            id=next(self.ids), age=age, name=name, gender=gender,
            email=email, password=password, location=location,
        )
        self.profiles[profile.id] = profile
        return profile

    async def login(self, email, password):
        for profile in self.profiles.values():
            if profile.email == email and profile.password == password:
                return profile.id
        raise LoginFailed()


class FakeDiscoveryStore:
    def __init__(self):
        self.candidates = []
        self.calls = []

    async def list_candidates(self, user_id, filters):
        self.calls.append((user_id, filters))
        return [c.model_copy() for c in self.candidates]


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def conn() -> StubConnection:
    return StubConnection()


@pytest.fixture
def stub_pool(conn) -> StubPool:
    return StubPool(conn)


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def matcher(ledger_store) -> SwipeMatcher:
    return SwipeMatcher(ledger_store, timeout=1.0)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def session_store(fake_redis) -> SessionStore:
    return SessionStore(fake_redis, ttl=1200)


@pytest.fixture
def profile_store() -> FakeProfileStore:
    return FakeProfileStore()


@pytest.fixture
def discovery_store() -> FakeDiscoveryStore:
    store = FakeDiscoveryStore()
    store.candidates = [
        DiscoverProfile(id=4, age=50, name="Tester", gender="female",
                        lat=-0.11406225575119984, long=51.55781040589032),
        DiscoverProfile(id=5, age=30, name="Bob", gender="male",
                        lat=-0.08768348444653988, long=51.508050972200834),
    ]
    return store


@pytest.fixture
def client(ledger_store, matcher, fake_redis, session_store, profile_store, discovery_store):
    app.dependency_overrides[deps.get_settings] = lambda: Settings(email_domain="test.app")
    app.dependency_overrides[deps.get_profile_store] = lambda: profile_store
    app.dependency_overrides[deps.get_discovery_store] = lambda: discovery_store
    app.dependency_overrides[deps.get_session_store] = lambda: session_store
    app.dependency_overrides[deps.get_matcher] = lambda: matcher
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(fake_redis):
    """Register a session token for a user id and return the request headers."""

    def _login(user_id: int) -> dict:
        token = f"token-{user_id}"
        fake_redis.data[f"session:{token}"] = str(user_id)
        return {"session": token}

    return _login
