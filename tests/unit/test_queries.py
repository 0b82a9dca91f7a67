"""Unit tests for tracking-table query builders."""

import pytest
from sqlalchemy.exc import IntegrityError

from mysql_migration_store.queries import (
    BaseQueries, MySQLSpecificQueries, SQLiteSpecificQueries, get_queries
)


class TestMySQLQueries:
    """Test MySQL statement text."""

    @pytest.fixture
    def queries(self):
        return MySQLSpecificQueries()

    def test_create_database(self, queries):
        assert queries.create_database('app') == "CREATE DATABASE IF NOT EXISTS `app`"

    def test_create_table(self, queries):
        assert queries.create_table('_migrations', 50) == (
            "CREATE TABLE IF NOT EXISTS `_migrations` "
            "(`name` VARCHAR(50) NOT NULL, PRIMARY KEY (`name`))"
        )

    def test_select(self, queries):
        assert queries.select_names('_migrations') == "SELECT `name` FROM `_migrations`"

    def test_clear_is_truncate(self, queries):
        assert queries.clear_table('_migrations') == "TRUNCATE TABLE `_migrations`"

    def test_quote_escapes_backticks(self, queries):
        assert queries.quote('we`ird') == "`we``ird`"

    def test_duplicate_entry_code(self, queries):
        error = IntegrityError("INSERT", {}, Exception(1062, "Duplicate entry 'm1' for key 'PRIMARY'"))
        assert queries.is_duplicate_key(error)

    def test_other_integrity_error(self, queries):
        error = IntegrityError("INSERT", {}, Exception(1048, "Column 'name' cannot be null"))
        assert not queries.is_duplicate_key(error)


class TestSQLiteQueries:
    """Test SQLite statement text."""

    @pytest.fixture
    def queries(self):
        return SQLiteSpecificQueries()

    def test_no_create_database(self, queries):
        assert queries.supports_create_database is False
        assert queries.create_database('app') is None

    def test_create_table(self, queries):
        assert queries.create_table('_migrations', 50) == (
            'CREATE TABLE IF NOT EXISTS "_migrations" '
            '("name" VARCHAR(50) NOT NULL, PRIMARY KEY ("name"))'
        )

    def test_clear_is_delete(self, queries):
        assert queries.clear_table('_migrations') == 'DELETE FROM "_migrations"'

    def test_unique_failure(self, queries):
        error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: _migrations.name"))
        assert queries.is_duplicate_key(error)

    def test_parameters_not_inspected(self, queries):
        """Words in the bound values do not make an error a duplicate."""
        error = IntegrityError(
            "INSERT", {'name': 'duplicate unique name'},
            Exception("NOT NULL constraint failed: _migrations.name")
        )
        assert 'duplicate' in str(error)
        assert not queries.is_duplicate_key(error)


class TestGetQueries:
    """Test query builder selection."""

    @pytest.mark.parametrize("backend,expected", [
        ('mysql', MySQLSpecificQueries),
        ('mariadb', MySQLSpecificQueries),
        ('sqlite', SQLiteSpecificQueries),
    ])
    def test_supported(self, backend, expected):
        queries = get_queries(backend)
        assert isinstance(queries, expected)
        assert isinstance(queries, BaseQueries)

    def test_unsupported(self):
        with pytest.raises(ValueError):
            get_queries('oracle')
