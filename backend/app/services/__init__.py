"""
Service layer: membership lifecycle, member activation and chapter ledger.
"""
