"""
This file contains tests for the Stub connection and StubResult.
"""

import pytest

from mysqli_python import NoRowsError, Parameter, Result, ResultType, Stub, StubResult


@pytest.fixture
def stub():
    stub = Stub()
    stub.connect("localhost", "user", "secret", "testdb")
    return stub


def test_connect_records_parameters(stub):
    assert stub.connect_args == {
        "host": "localhost",
        "user": "user",
        "password": "secret",
        "dbname": "testdb",
        "port": None,
        "charset": None,
        "collation": None,
    }
    assert stub.is_connected


def test_reconnect_keeps_parameters(stub):
    stub.reconnect()
    assert stub.connect_args["dbname"] == "testdb"


def test_canned_values(stub):
    assert stub.insert_id() == 1
    assert stub.affected_rows() == 1
    assert stub.escape("it's") == "it's"
    assert stub.client_info() == "client info"
    assert stub.host_info() == "host info"
    assert stub.proto_info() == 1
    assert stub.server_info() == "server info"
    assert stub.size() == 1
    assert stub.size("other") == 1
    assert stub.errno() == 1
    assert stub.errstr() == "error"
    assert stub.get_db_time() == 1.0
    assert stub.get_total_queries() == 1


def test_no_op_operations(stub):
    stub.autocommit(False)
    stub.begin_transaction()
    stub.commit()
    stub.rollback()
    stub.ping()
    stub.close()
    stub.close()


def test_usable_without_connect():
    stub = Stub()
    assert stub.is_connected is False
    assert stub.query("UPDATE t SET a = 1") is True
    stub.reconnect()
    assert stub.connect_args is None


def test_non_select_returns_true(stub):
    assert stub.query("INSERT INTO t (a) VALUES (?)", Parameter("i", 1)) is True
    assert stub.execute(Parameter("i", 2)) is True


def test_select_returns_payload(stub):
    stub.add_payload([{"id": 1, "name": "pen"}, {"id": 2, "name": "ink"}])
    result = stub.query("  select id, name FROM t")
    assert isinstance(result, StubResult)
    assert isinstance(result, Result)
    assert result.num_rows() == 2
    assert result.fetch_row_assoc() == {"id": 1, "name": "pen"}
    assert result.result_as_string(1, "name") == "ink"
    with pytest.raises(NoRowsError):
        result.fetch_row_assoc()


def test_execute_repeats_last_select(stub):
    stub.add_payload([{"id": 1}])
    stub.query("SELECT id FROM t WHERE id = ?", Parameter("i", 1))
    result = stub.execute(Parameter("i", 2))
    assert result.fetch_all() == [{0: 1}]


def test_execute_before_query(stub):
    assert stub.execute() is True


def test_select_without_payload(stub):
    result = stub.query("SELECT 1")
    assert result.num_rows() == 0
    assert result.fetch_assoc() is None


def test_add_payload_rejects_non_list(stub):
    with pytest.raises(TypeError):
        stub.add_payload({"id": 1})


def test_stub_result_columns_are_union_of_keys():
    result = StubResult([{"a": 1}, {"b": 2, "a": 3}])
    assert result.column_names == ["a", "b"]
    assert result.fetch_all() == [{0: 1, 1: None}, {0: 3, 1: 2}]


def test_stub_result_validates_payload():
    with pytest.raises(TypeError):
        StubResult({"a": 1})
    with pytest.raises(TypeError):
        StubResult([("a", 1)])


def test_stub_as_context_manager():
    with Stub() as stub:
        assert stub.query("DELETE FROM t") is True


def test_select_star_and_update():
    stub = Stub()
    stub.add_payload([{"id": 1, "name": "x"}])
    assert stub.query("SELECT * FROM t").fetch_array(ResultType.ASSOC) == {"id": 1, "name": "x"}
    assert stub.query("UPDATE t SET name = 'y'") is True
