"""
Integrity error classification against driver-shaped fakes.

The fakes mimic what each driver exposes on `IntegrityError.orig`:
SQLite/MySQL only a message, Postgres an SQLSTATE plus diagnostics.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from servicecore.exceptions import ConstraintKind, classify_integrity_error, integrity_error_to_app_error
from servicecore.messages import MessageCode


class FakePostgresError(Exception):
    def __init__(
        self, message: str, pgcode: str, constraint_name: str | None = None, table_name: str | None = None
    ):
        super().__init__(message)
        self.pgcode = pgcode
        self.diag = SimpleNamespace(constraint_name=constraint_name, table_name=table_name)


def make_integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO countries ...", {}, orig)


class TestClassifyIntegrityError:

    def test_sqlite_unique(self):
        info = classify_integrity_error(make_integrity_error(Exception("UNIQUE constraint failed: countries.code")))

        assert info.kind is ConstraintKind.UNIQUE
        assert info.columns == ["code"]

    def test_sqlite_composite_unique(self):
        info = classify_integrity_error(
            make_integrity_error(Exception("UNIQUE constraint failed: users.tenant_id, users.email"))
        )
        assert info.columns == ["tenant_id", "email"]

    def test_sqlite_not_null(self):
        info = classify_integrity_error(make_integrity_error(Exception("NOT NULL constraint failed: countries.name")))

        assert info.kind is ConstraintKind.NOT_NULL
        assert info.columns == ["name"]

    def test_postgres_unique_uses_sqlstate_and_diag(self):
        orig = FakePostgresError(
            'duplicate key value violates unique constraint "uq_countries_code"\n'
            "DETAIL:  Key (code)=(US) already exists.",
            pgcode="23505",
            constraint_name="uq_countries_code",
        )

        info = classify_integrity_error(make_integrity_error(orig))

        assert info.kind is ConstraintKind.UNIQUE
        assert info.constraint == "uq_countries_code"
        assert info.columns == ["code"]

    def test_postgres_foreign_key(self):
        orig = FakePostgresError(
            'insert or update violates foreign key constraint "fk_users_tenant_id_tenants"', pgcode="23503"
        )

        info = classify_integrity_error(make_integrity_error(orig))

        assert info.kind is ConstraintKind.FOREIGN_KEY
        assert info.constraint == "fk_users_tenant_id_tenants"

    def test_postgres_unknown_sqlstate(self):
        info = classify_integrity_error(make_integrity_error(FakePostgresError("exclusion", pgcode="23P01")))
        assert info.kind is ConstraintKind.UNKNOWN

    def test_mysql_not_null(self):
        info = classify_integrity_error(make_integrity_error(Exception("Column 'name' cannot be null")))

        assert info.kind is ConstraintKind.NOT_NULL
        assert info.columns == ["name"]

    def test_check_constraint(self):
        info = classify_integrity_error(make_integrity_error(Exception("CHECK constraint failed: positive_total")))
        assert info.kind is ConstraintKind.CHECK

    def test_table_from_sqlite_message(self):
        info = classify_integrity_error(make_integrity_error(Exception("UNIQUE constraint failed: users.email")))
        assert info.table == "users"

    def test_table_from_postgres_diag(self):
        orig = FakePostgresError(
            'duplicate key value violates unique constraint "uq_users_email"',
            pgcode="23505",
            table_name="users",
        )

        assert classify_integrity_error(make_integrity_error(orig)).table == "users"

    def test_table_falls_back_to_statement(self):
        info = classify_integrity_error(make_integrity_error(Exception("Duplicate entry 'US' for key 'code'")))
        assert info.table == "countries"

    def test_unrecognized_message(self):
        info = classify_integrity_error(make_integrity_error(Exception("something odd")))

        assert info.kind is ConstraintKind.UNKNOWN
        assert info.columns == []


class TestIntegrityErrorToAppError:

    def test_unique_becomes_duplicate_entry(self):
        err = integrity_error_to_app_error(
            make_integrity_error(Exception("UNIQUE constraint failed: users.tenant_id")), resource="User"
        )

        assert err.message_code == MessageCode.DUPLICATE_ENTRY
        assert err.status_code == 409
        assert err.message == "User with this tenantId already exists"

    def test_unique_without_columns_uses_generic_field(self):
        err = integrity_error_to_app_error(make_integrity_error(Exception("Duplicate entry 'US' for key 'code'")))
        assert err.message == "Record with this field already exists"

    def test_resource_comes_from_failing_table(self):
        """
        Behavior:
                - No explicit resource; the failing table is registered as "Country".
                - The message names the entity instead of the generic "Record".
        """
        err = integrity_error_to_app_error(
            make_integrity_error(Exception("UNIQUE constraint failed: countries.code")),
            table_resources={"countries": "Country"},
        )

        assert err.message == "Country with this code already exists"

    def test_explicit_resource_wins_over_table(self):
        err = integrity_error_to_app_error(
            make_integrity_error(Exception("UNIQUE constraint failed: countries.code")),
            resource="Nation",
            table_resources={"countries": "Country"},
        )

        assert err.message == "Nation with this code already exists"

    def test_not_null_becomes_field_required(self):
        err = integrity_error_to_app_error(make_integrity_error(Exception("NOT NULL constraint failed: countries.name")))

        assert err.message_code == MessageCode.FIELD_REQUIRED
        assert err.status_code == 422
        assert err.message == "name is required"

    @pytest.mark.parametrize("message", ["FOREIGN KEY constraint failed", "CHECK constraint failed: ck_x"])
    def test_fk_and_check_become_invalid_input(self, message):
        err = integrity_error_to_app_error(make_integrity_error(Exception(message)))

        assert err.message_code == MessageCode.INVALID_INPUT
        assert err.status_code == 422

    def test_unknown_becomes_internal_error_without_raw_message(self):
        err = integrity_error_to_app_error(make_integrity_error(Exception("secret internals")))

        assert err.message_code == MessageCode.INTERNAL_ERROR
        assert "secret" not in err.message
