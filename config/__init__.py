"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    db: Function to get Supabase client
    get_supabase_client: Same as db
    check_connection: Health check function
    column alias tables for the supported import schemas
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    db,
    get_supabase_client,
    get_admin_client,
    check_connection,
    reset_connection,
    DatabaseError,
    ConnectionError
)
from config.column_mapping import (
    MATERIAL_COLUMN_ALIASES,
    EQUIPMENT_COLUMN_ALIASES,
    PRODUCT_COLUMN_ALIASES,
    ALIAS_TABLES,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "db",
    "get_supabase_client",
    "get_admin_client",
    "check_connection",
    "reset_connection",
    "DatabaseError",
    "ConnectionError",

    # Column aliases
    "MATERIAL_COLUMN_ALIASES",
    "EQUIPMENT_COLUMN_ALIASES",
    "PRODUCT_COLUMN_ALIASES",
    "ALIAS_TABLES",
]
