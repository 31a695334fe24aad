"""
Tests for unique-violation field extraction.
"""
from app.core.errors import ConflictError, integrity_error_field


class TestIntegrityErrorField:

    def test_sqlite_message(self):
        message = "UNIQUE constraint failed: memberships.invoice_number"
        assert integrity_error_field(message) == "invoice_number"

    def test_postgres_key_detail(self):
        message = (
            'duplicate key value violates unique constraint "uq_memberships_invoice_number"\n'
            "DETAIL:  Key (invoice_number)=(2425-00001) already exists."
        )
        assert integrity_error_field(message) == "invoice_number"

    def test_postgres_constraint_name_only(self):
        message = 'duplicate key value violates unique constraint "uq_users_email"'
        assert integrity_error_field(message) == "email"

    def test_unrecognised_message(self):
        assert integrity_error_field("something else broke") == "record"

    def test_conflict_is_409(self):
        assert ConflictError("taken").status_code == 409
