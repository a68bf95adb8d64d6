import pytest

from samaritan_core.errors import AddressNotFound, AlreadySubscribed, SubscriptionNotFound
from samaritan_core.events import TopicSubscriptionComplete, TopicUnsubscriptionComplete
from samaritan_core.nodes import NodeDirectory
from samaritan_core.subscriptions import SubscriptionGraph

APP = "did:sam:apps:subfgns89fgg09sgs0j9fusj0fjd"
ADDR = "/ip4/192.168.44.205/tcp/1509"
OTHER = "/ip4/10.0.0.7/tcp/1509"


@pytest.fixture
def directory(storage, events):
    d = NodeDirectory(storage, events)
    d.add_address(ADDR)
    d.add_address(OTHER)
    return d


@pytest.fixture
def graph(storage, events, directory):
    return SubscriptionGraph(storage, events, directory)


def test_subscribing_flow_works(graph, events):
    before = graph.get_subscribers(APP)

    graph.subscribe_node(APP, ADDR)
    assert graph.get_subscribers(APP) == [ADDR]

    graph.unsubscribe_node(APP, ADDR)
    assert graph.get_subscribers(APP) == before == []

    assert events.history()[-2:] == [
        TopicSubscriptionComplete(did=APP, node=ADDR),
        TopicUnsubscriptionComplete(did=APP, node=ADDR),
    ]


def test_subscribers_in_creation_order(graph):
    graph.subscribe_node(APP, OTHER)
    graph.subscribe_node(APP, ADDR)
    assert graph.get_subscribers(APP) == [OTHER, ADDR]
    assert graph.get_subscribers_encoded(APP) == f"{OTHER}$$${ADDR}$$$".encode()


def test_subscribe_requires_known_node(graph, storage):
    with pytest.raises(AddressNotFound):
        graph.subscribe_node(APP, "/ip4/9.9.9.9")
    assert storage.list_subscribers(APP) == []


def test_double_subscribe_rejected(graph):
    graph.subscribe_node(APP, ADDR)
    with pytest.raises(AlreadySubscribed):
        graph.subscribe_node(APP, ADDR)
    assert graph.get_subscribers(APP) == [ADDR]


def test_lone_unsubscribe_fails(graph, events):
    n = len(events.history())
    with pytest.raises(SubscriptionNotFound):
        graph.unsubscribe_node(APP, ADDR)
    assert len(events.history()) == n


def test_many_to_many(graph):
    graph.subscribe_node("did:sam:app1", ADDR)
    graph.subscribe_node("did:sam:app2", ADDR)
    graph.subscribe_node("did:sam:app1", OTHER)

    assert graph.get_subscribers("did:sam:app1") == [ADDR, OTHER]
    assert graph.get_subscribers("did:sam:app2") == [ADDR]

    graph.unsubscribe_node("did:sam:app1", ADDR)
    assert graph.get_subscribers("did:sam:app2") == [ADDR]


def test_removed_node_leaves_stale_edge(graph, directory):
    graph.subscribe_node(APP, ADDR)
    graph.subscribe_node(APP, OTHER)
    directory.remove_address(ADDR)

    assert graph.get_subscribers(APP) == [ADDR, OTHER]
    assert graph.get_subscribers(APP, live_only=True) == [OTHER]

    # the stale edge can still be cleaned up explicitly
    graph.unsubscribe_node(APP, ADDR)
    assert graph.get_subscribers(APP) == [OTHER]


def test_unknown_app_has_no_subscribers(graph):
    assert graph.get_subscribers("did:sam:nobody") == []
    assert graph.get_subscribers_encoded("did:sam:nobody") == b""
