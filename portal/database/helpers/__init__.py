"""
Support code shared by the entities, DAOs and service functions.

Contents
--------
- transactionManagement
    `@transactional` and the `db_session_context` variable: one session per
    unit of work, reused by nested service calls, committed or rolled back
    by the outermost one.
- defaults
    Primary-key and timestamp defaults (`new_id`, `utc_now`) plus `as_utc`
    for datetimes SQLite hands back without a timezone.
"""
