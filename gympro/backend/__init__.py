"""
Remote Data Service

Exports the contract, its errors and the adapter factory.
"""

from flask import current_app

from gympro.backend.base import AuthError, AuthResult, DataService, DataServiceError

EXTENSION_KEY = 'gympro.data_service'


def make_data_service(config, token_provider=None):
    """Build the adapter named by ``DATA_BACKEND``."""
    backend = config.get('DATA_BACKEND', 'sql')
    if backend == 'sql':
        from gympro.backend.sql import SqlDataService
        return SqlDataService()
    if backend == 'supabase':
        from gympro.backend.supabase import SupabaseDataService
        return SupabaseDataService(
            config['SUPABASE_URL'],
            config['SUPABASE_ANON_KEY'],
            timeout=config.get('DATA_SERVICE_TIMEOUT', 10.0),
            token_provider=token_provider,
        )
    raise ValueError(f"Unknown DATA_BACKEND '{backend}'")


def get_data_service() -> DataService:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'AuthError',
    'AuthResult',
    'DataService',
    'DataServiceError',
    'EXTENSION_KEY',
    'get_data_service',
    'make_data_service',
]
