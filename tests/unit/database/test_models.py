"""Unit tests for database request and result models."""

from queryproxy.database.models import (
    ConnectionTestResult,
    DatabaseEngine,
    QueryResult,
)


def test_engine_values():
    assert DatabaseEngine.values() == ["postgresql", "mysql", "oracle", "mssql"]


def test_connection_info_hides_password(make_connection):
    connection = make_connection(DatabaseEngine.ORACLE)

    assert connection.password not in repr(connection)
    assert connection.to_safe_dict() == {
        "engine": "oracle",
        "host": "db.internal",
        "port": 1521,
        "database_name": "analytics",
        "username": "reader",
    }


def test_failure_result_to_dict():
    result = QueryResult.failure("Query timed out after 30s", error_code="QUERY_TIMEOUT", execution_time_ms=30000.0)

    assert result.to_dict() == {
        "success": False,
        "executionTimeMs": 30000.0,
        "error": "Query timed out after 30s",
        "errorCode": "QUERY_TIMEOUT",
    }


def test_rows_result_to_dict():
    result = QueryResult(
        success=True,
        execution_time_ms=2.0,
        rows=[{"id": 1}],
        row_count=1,
        columns=["id"],
    )

    assert result.to_dict() == {
        "success": True,
        "executionTimeMs": 2.0,
        "rows": [{"id": 1}],
        "rowCount": 1,
        "columns": ["id"],
    }


def test_connection_test_result_to_dict():
    assert ConnectionTestResult(True, "Connection successful", server_version="MySQL 8.0.36").to_dict() == {
        "success": True,
        "message": "Connection successful",
        "serverVersion": "MySQL 8.0.36",
    }
    assert ConnectionTestResult(False, "Connection failed: refused", error_code="CONNECTION_FAILED").to_dict() == {
        "success": False,
        "message": "Connection failed: refused",
        "errorCode": "CONNECTION_FAILED",
    }
