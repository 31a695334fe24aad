"""
SQLAlchemy models for ChapterDesk.

Modules:
- Core: Users, zones, chapters
- Membership: Members, packages, memberships (invoices)
- Finance: Chapter cash/bank transactions
"""
# Core models
from app.models.user import User, UserRole
from app.models.zone import Zone
from app.models.chapter import Chapter

# Membership module
from app.models.member import Member
from app.models.package import Package
from app.models.membership import Membership

# Finance module
from app.models.transaction import Transaction, AccountType, TransactionType

__all__ = [
    # Core
    "User",
    "UserRole",
    "Zone",
    "Chapter",
    # Membership
    "Member",
    "Package",
    "Membership",
    # Finance
    "Transaction",
    "AccountType",
    "TransactionType",
]
