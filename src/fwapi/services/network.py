"""Network interface snapshot.

Provides:
- Interface discovery via psutil
- Default interface selection

Nothing is cached: every call takes a fresh snapshot of the host.
"""

import ipaddress
import socket
from dataclasses import dataclass, field, asdict
from typing import Optional

import psutil

from fwapi.core.exceptions import NotFoundError


UNKNOWN_MAC = "unknown"


@dataclass
class InterfaceDescriptor:
    """Snapshot of one host network interface."""
    name: str
    description: str = ""
    mac: str = UNKNOWN_MAC
    ips: list[str] = field(default_factory=list)
    up: bool = False
    loopback: bool = False
    running: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def format_address(address: str, netmask: Optional[str]) -> Optional[str]:
    """Render an address as ``ip/prefix`` (or bare ip without netmask).

    Returns:
        Canonical string, or None if psutil reported something unparsable
    """
    # Link-local IPv6 addresses carry a zone suffix (fe80::1%eth0)
    address = address.split("%", 1)[0]
    try:
        if netmask:
            # ipaddress only takes IPv6 masks as a prefix length
            prefix = bin(int(ipaddress.ip_address(netmask))).count("1")
            return str(ipaddress.ip_interface(f"{address}/{prefix}"))
        return str(ipaddress.ip_address(address))
    except ValueError:
        return None


def _parse_flags(flags: str) -> set[str]:
    return {flag.strip() for flag in flags.split(",") if flag.strip()}


def get_interfaces() -> list[InterfaceDescriptor]:
    """List all network interfaces in enumeration order.

    Returns:
        One InterfaceDescriptor per interface
    """
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()

    names = list(addrs)
    names.extend(name for name in stats if name not in addrs)

    interfaces = []
    for name in names:
        descriptor = InterfaceDescriptor(name=name)

        for addr in addrs.get(name, []):
            if addr.family == psutil.AF_LINK:
                if addr.address:
                    descriptor.mac = addr.address.lower()
            elif addr.family in (socket.AF_INET, socket.AF_INET6):
                formatted = format_address(addr.address, addr.netmask)
                if formatted:
                    descriptor.ips.append(formatted)

        stat = stats.get(name)
        if stat is not None:
            flags = _parse_flags(getattr(stat, "flags", ""))
            descriptor.up = stat.isup
            descriptor.loopback = "loopback" in flags
            descriptor.running = "running" in flags

        interfaces.append(descriptor)

    return interfaces


def select_default_interface(
    interfaces: list[InterfaceDescriptor],
) -> Optional[InterfaceDescriptor]:
    """Pick the first interface that is up, not loopback and has an IP."""
    for intf in interfaces:
        if intf.up and not intf.loopback and intf.ips:
            return intf
    return None


def get_default_interface() -> InterfaceDescriptor:
    """Get the default network interface.

    Raises:
        NotFoundError: If no interface is up, non-loopback and addressed
    """
    default = select_default_interface(get_interfaces())
    if default is None:
        raise NotFoundError(
            "No default network interface found",
            hint="No interface is up, non-loopback and has an IP address",
        )
    return default
