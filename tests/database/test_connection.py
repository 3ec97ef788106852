import pytest

from guitar_studio.database.connection import DatabaseConnection, MongoConfig, database_name_from_uri


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("mongodb://localhost:27017/thaybien", "thaybien"),
        ("mongodb+srv://user:pw@cluster0.example.net/studio?retryWrites=true&w=majority", "studio"),
        ("mongodb://localhost:27017/", "thaybien"),
        ("mongodb://localhost:27017", "thaybien"),
        ("", "thaybien"),
    ],
)
def test_database_name_from_uri(uri, expected):
    assert database_name_from_uri(uri) == expected


def test_explicit_name_wins():
    assert database_name_from_uri("mongodb://localhost/abc", "xyz") == "xyz"
    assert MongoConfig(uri="mongodb://localhost/abc", db_name="xyz").database == "xyz"


def test_db_uses_resolved_name_on_given_client():
    client = {"studio": "studio-db"}
    conn = DatabaseConnection(MongoConfig(uri="mongodb://localhost/studio"), client=client)
    assert conn.db() == "studio-db"


def test_get_instance_is_cached_per_config(monkeypatch):
    monkeypatch.setattr(DatabaseConnection, "_instances", {})

    first = DatabaseConnection.get_instance(MongoConfig(uri="mongodb://localhost/studio"))
    same = DatabaseConnection.get_instance(MongoConfig(uri="mongodb://localhost/studio"))
    other = DatabaseConnection.get_instance(MongoConfig(uri="mongodb://localhost/studio", db_name="thaybien_test"))

    assert first is same
    assert other is not first
    assert other._config.database == "thaybien_test"
