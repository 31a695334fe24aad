"""
SQLAlchemy implementations of the service persistence ports.
"""
from app.repositories.membership import SqlAlchemyMembershipStore
from app.repositories.ledger import SqlAlchemyLedgerStore

__all__ = [
    "SqlAlchemyMembershipStore",
    "SqlAlchemyLedgerStore",
]
