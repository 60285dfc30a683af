"""
Configuration module for the ledger.
"""
from .settings import (
    FluxLedgerConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'FluxLedgerConfig',
    'get_config',
    'load_config',
    'reload_config'
]
