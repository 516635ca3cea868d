"""
Core infrastructure for the page builder.

Shared components used across all modules:
- Database connections and sessions (page_builder.core.database)
- Configuration management (page_builder.core.config)
- Logging (page_builder.core.logging)

Submodules are imported explicitly; importing the database module
requires DATABASE_URL to be set.
"""
