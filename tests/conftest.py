import pytest

from eli5.errors import ConnectivityError
from eli5.models import User
from eli5.persistence.remote_store import create_schema, create_store
from eli5.persistence.session_store import SessionStore


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = 1_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1_000) -> int:
        self.now += ms
        return self.now


class FlakyRemote:
    """Delegates to a real remote store; methods named in `fail_on` raise."""

    def __init__(self, inner, fail_on=()):
        self.inner = inner
        self.fail_on = set(fail_on)
        self.calls = []

    def __getattr__(self, name):
        target = getattr(self.inner, name)

        def wrapper(*args, **kwargs):
            self.calls.append(name)
            if name in self.fail_on:
                raise ConnectivityError()
            return target(*args, **kwargs)

        return wrapper


@pytest.fixture
def remote():
    store = create_store("sqlite://")
    create_schema(store.engine)
    yield store
    store.engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def user(remote):
    created = remote.create_account(
        email="ada@example.com", name="Ada Lovelace", password_hash="not-a-hash"
    )
    return User.from_record(created)


@pytest.fixture
def flaky(remote):
    return FlakyRemote(remote)


@pytest.fixture
def store(flaky, clock):
    return SessionStore(flaky, clock=clock)
