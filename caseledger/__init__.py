"""
caseledger
==========

Referential-integrity validation and repair for guild-scoped law-firm
records: staff, cases, job postings, applications, retainers, feedback
and reminders.

Records refer to each other by identifier (a case names its lead attorney
by user id, an application names its job by id, ...). When a record is
deleted or changes status those references can dangle or go stale. The
integrity engine scans a guild for such problems, reports them by severity
and applies the safe, idempotent repairs, recording each in an audit log.

Main Components:
    - database: SQLAlchemy models, entity managers, CaseLedgerDB
    - database.integrity: Rules, cache, scans and repairs
    - database.cli: The `caseledger` command
    - core: Logging, validation, paths, exceptions
"""
__version__ = "1.0.0"
