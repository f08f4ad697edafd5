"""SQLite persistence for registry state.

Public API: SCHEMA_VERSION, init_schema
Internal: schema
"""

from registrar.store.schema import SCHEMA_VERSION, init_schema

__all__ = ["SCHEMA_VERSION", "init_schema"]
