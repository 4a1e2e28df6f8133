import pytest

from apsclient.connections import (
    ConnectionForm,
    ConnectionsList,
    status_message,
    validate_address,
)
from apsclient.messages import ConnectionStatus
from apsclient.store import ConnectionInfo, ConnectionStore


@pytest.fixture
def store(tmp_path):
    return ConnectionStore(tmp_path / "connections.xml")


def _info(name, ac="10.0.0.1:9999", p2="10.0.0.2:9999"):
    return ConnectionInfo(name_connection=name, tcp_ac=ac, tcp_p2=p2)


@pytest.mark.parametrize("text", ["127.0.0.1:9999", "localhost", "tcp://example.com:80"])
def test_validate_address_accepts_hosts(text):
    assert validate_address(text) is True


@pytest.mark.parametrize("text", ["", "   ", "host:notaport"])
def test_validate_address_rejects_bad_input(text):
    assert validate_address(text) is False


def test_status_message_for_failures():
    failed = status_message(ConnectionStatus.UNCONNECTED)
    assert failed.text == "Невозможно подключиться к сокету"
    assert failed.severity == "critical"
    assert failed.title == "Статус подключения"
    dropped = status_message(ConnectionStatus.DISCONNECTED)
    assert dropped.text == "Отключение от сокетов"
    assert dropped.severity == "warning"


@pytest.mark.parametrize("status", [ConnectionStatus.CONNECTED, ConnectionStatus.CONNECTING])
def test_status_message_silent_otherwise(status):
    assert status_message(status) is None


def test_add_connection_assigns_first_id_and_persists(store):
    connections = ConnectionsList(store)
    saved = connections.add_connection(_info("alpha"))
    assert saved.id == 1
    assert [row.name_connection for row in connections.rows] == ["alpha"]
    assert [info.name_connection for info in store.elements()] == ["alpha"]


def test_list_reloads_saved_connections(store):
    first = ConnectionsList(store)
    first.add_connection(_info("alpha"))
    first.add_connection(_info("beta"))
    second = ConnectionsList(ConnectionStore(store.path))
    assert [row.name_connection for row in second.rows] == ["alpha", "beta"]
    ids = [row.id for row in second.rows]
    assert second.connection_info(ids[1]).name_connection == "beta"


def test_remove_connection_drops_row_and_file_entry(store):
    connections = ConnectionsList(store)
    kept = connections.add_connection(_info("alpha"))
    gone = connections.add_connection(_info("beta"))
    connections.remove_connection(gone.id)
    assert [row.id for row in connections.rows] == [kept.id]
    assert [info.id for info in store.elements()] == [kept.id]


def test_change_connection_replaces_and_selects_last(store):
    connections = ConnectionsList(store)
    old = connections.add_connection(_info("alpha"))
    connections.add_connection(_info("beta"))
    new = connections.change_connection(old.id, _info("gamma"))
    names = [row.name_connection for row in connections.rows]
    assert names == ["beta", "gamma"]
    assert connections.current_row == len(names) - 1
    assert connections.connection_info(new.id).name_connection == "gamma"


def test_form_select_fills_fields(store):
    connections = ConnectionsList(store)
    saved = connections.add_connection(_info("alpha", ac="host-a:1", p2="host-b:2"))
    form = ConnectionForm(connections)
    form.select(saved.id)
    assert (form.name_connection, form.tcp_ac, form.tcp_p2) == ("alpha", "host-a:1", "host-b:2")
    assert form.selected.id == saved.id


def test_form_save_blank_does_nothing(store):
    connections = ConnectionsList(store)
    form = ConnectionForm(connections)
    assert form.save() is None
    assert connections.rows == []


def test_form_save_adds_then_changes(store):
    connections = ConnectionsList(store)
    form = ConnectionForm(connections)
    form.name_connection = "alpha"
    form.tcp_ac = "host-a"
    first = form.save()
    assert [row.name_connection for row in connections.rows] == ["alpha"]

    form.select(first.id)
    form.name_connection = "renamed"
    changed = form.save()
    assert [row.name_connection for row in connections.rows] == ["renamed"]
    assert form.selected.id == changed.id
    assert form.name_connection == "renamed"


def test_form_remove_requires_named_selection(store):
    connections = ConnectionsList(store)
    form = ConnectionForm(connections)
    assert form.remove() is False
    saved = connections.add_connection(_info("alpha"))
    form.select(saved.id)
    assert form.remove() is True
    assert connections.rows == []
    assert store.elements() == []


def test_form_clear_resets_everything(store):
    connections = ConnectionsList(store)
    saved = connections.add_connection(_info("alpha"))
    form = ConnectionForm(connections)
    form.select(saved.id)
    form.clear()
    assert (form.name_connection, form.tcp_ac, form.tcp_p2) == ("", "", "")
    assert form.selected == ConnectionInfo()
    assert connections.current_row is None


def test_connect_request_returns_addresses_when_valid(store):
    form = ConnectionForm(ConnectionsList(store))
    form.tcp_ac = " 127.0.0.1:9999 "
    form.tcp_p2 = "localhost"
    assert form.connect_request() == ("127.0.0.1:9999", "localhost")
    form.tcp_p2 = ""
    assert form.connect_request() is None