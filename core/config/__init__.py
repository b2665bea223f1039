"""
Move Masters Core Config — Public API
========================================
Admin-configurable pay scales and tariff policy.
"""

from core.config.rules import (
    ConfigStore,
    InMemoryConfigStore,
    PayScale,
    TariffPolicy,
)

__all__ = [
    "PayScale",
    "TariffPolicy",
    "ConfigStore",
    "InMemoryConfigStore",
]
