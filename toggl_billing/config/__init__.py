"""
Configuration module for the billing reconciler.
"""
from .settings import BillingConfig, get_config, load_config, reload_config

__all__ = [
    'BillingConfig',
    'get_config',
    'load_config',
    'reload_config'
]
