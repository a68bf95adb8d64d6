import pytest

from samaritan_core.config import ContractConfig
from samaritan_core.contract import DbContract
from samaritan_core.events import EventEmitter
from samaritan_core.storage import InMemoryStorage, SQLiteStorage
from samaritan_core.transport import LocalAdapter


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        store = InMemoryStorage()
    else:
        store = SQLiteStorage(str(tmp_path / "state.db"))
    yield store
    store.close()


@pytest.fixture
def bus():
    return LocalAdapter()


@pytest.fixture
def events(storage, bus):
    return EventEmitter(storage, bus)


@pytest.fixture
def published(bus):
    """Every message the contract publishes, in order."""
    seen = []
    bus.subscribe("samaritan.contract.*", seen.append)
    return seen


@pytest.fixture
def make_contract(storage, events):
    def _make(**overrides):
        return DbContract(storage, events, ContractConfig(storage_provider="memory", **overrides))
    return _make


@pytest.fixture
def contract(make_contract):
    return make_contract()
