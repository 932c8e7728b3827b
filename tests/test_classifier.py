import pytest

from portwatch.core import ProcessType, classify


@pytest.mark.parametrize("name, expected", [
    ("nginx", ProcessType.WEB_SERVER),
    ("httpd", ProcessType.WEB_SERVER),
    ("postgres", ProcessType.DATABASE),
    ("redis-server", ProcessType.DATABASE),
    ("mongod", ProcessType.DATABASE),
    ("node", ProcessType.DEVELOPMENT),
    ("Python3.12", ProcessType.DEVELOPMENT),
    ("launchd", ProcessType.SYSTEM),
    ("ControlCenter", ProcessType.SYSTEM),
    ("sshd", ProcessType.OTHER),
    ("", ProcessType.OTHER),
])
def test_classify_known_names(name, expected) -> None:
    assert classify(name) == expected


def test_classify_first_table_wins() -> None:
    # Matches both the database and the development keywords
    assert classify("mysql-node-wrapper") == ProcessType.DATABASE
    # Matches both the web server and the development keywords
    assert classify("nginx-node-proxy") == ProcessType.WEB_SERVER


def test_classify_is_case_insensitive() -> None:
    assert classify("NGINX") == classify("nginx") == ProcessType.WEB_SERVER


def test_classify_none_is_other() -> None:
    assert classify(None) == ProcessType.OTHER


def test_labels() -> None:
    assert ProcessType.WEB_SERVER.label == "Web Server"
    assert [t.label for t in ProcessType] == ["Web Server", "Database", "Development", "System", "Other"]
