"""Service abstractions over iptables and the host's network interfaces."""

from fwapi.services.iptables import IptablesService
from fwapi.services.chains import ChainService, TABLES

__all__ = [
    "IptablesService",
    "ChainService",
    "TABLES",
]
