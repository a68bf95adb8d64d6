import pytest

from samaritan_core.codec import decode_list
from samaritan_core.errors import AddressNotFound, CapacityExceeded, DuplicateAddress
from samaritan_core.events import BootNodeAdded, BootNodeRemoved
from samaritan_core.nodes import NodeDirectory

ADDR = "/ip4/192.168.44.205/tcp/1509"


@pytest.fixture
def directory(storage, events):
    return NodeDirectory(storage, events, max_nodes=2)


def test_add_address_works(directory, events):
    directory.add_address(ADDR)

    assert directory.get_node_addresses() == [ADDR]
    assert events.history() == [BootNodeAdded(address=ADDR)]


def test_duplicate_address_rejected(directory):
    directory.add_address(ADDR)
    with pytest.raises(DuplicateAddress):
        directory.add_address(ADDR)
    assert directory.get_node_addresses() == [ADDR]


def test_capacity_fails_closed(directory, events):
    directory.add_address("/ip4/1.1.1.1")
    directory.add_address("/ip4/2.2.2.2")

    with pytest.raises(CapacityExceeded):
        directory.add_address("/ip4/3.3.3.3")

    # nothing evicted
    assert directory.get_node_addresses() == ["/ip4/1.1.1.1", "/ip4/2.2.2.2"]
    assert len(events.history("BootNodeAdded")) == 2


def test_duplicate_reported_before_capacity(directory):
    directory.add_address("/ip4/1.1.1.1")
    directory.add_address("/ip4/2.2.2.2")
    with pytest.raises(DuplicateAddress):
        directory.add_address("/ip4/1.1.1.1")


def test_remove_frees_a_slot(directory):
    directory.add_address("/ip4/1.1.1.1")
    directory.add_address("/ip4/2.2.2.2")
    directory.remove_address("/ip4/1.1.1.1")
    directory.add_address("/ip4/3.3.3.3")

    assert directory.get_node_addresses() == ["/ip4/2.2.2.2", "/ip4/3.3.3.3"]


def test_remove_unknown_address(directory, events):
    with pytest.raises(AddressNotFound):
        directory.remove_address(ADDR)
    assert events.history() == []


def test_remove_emits_event(directory, events):
    directory.add_address(ADDR)
    directory.remove_address(ADDR)
    assert events.history()[-1] == BootNodeRemoved(address=ADDR)
    assert directory.get_node_addresses() == []


def test_encoded_addresses(directory):
    directory.add_address("/ip4/1.1.1.1")
    directory.add_address("/ip4/2.2.2.2")

    encoded = directory.get_node_addresses_encoded()
    assert encoded == b"/ip4/1.1.1.1$$$/ip4/2.2.2.2$$$"
    assert decode_list(encoded) == directory.get_node_addresses()


def test_max_nodes_must_be_positive(storage, events):
    with pytest.raises(ValueError):
        NodeDirectory(storage, events, max_nodes=0)
