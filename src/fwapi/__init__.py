"""
fwapi - REST API over a host's iptables tables, chains and rules.

Exposes tables, chains, rules, chain policies and network interfaces
as HTTP resources, with case-insensitive chain names and 0-based rule
positions.
"""

__version__ = "1.0.0"
__author__ = "fwapi Team"
