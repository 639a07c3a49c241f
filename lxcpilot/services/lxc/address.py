"""Container IP address discovery."""
import re
from typing import List, Optional

from .cli import LxcCli

INET_PATTERN = re.compile(r"^\s+inet ([0-9.]+)/[0-9]+\s+", re.MULTILINE)


def parse_ipv4(output: str) -> Optional[str]:
    """Extract the first IPv4 address from ``ip -4 addr show`` output.

    Args:
        output: Text such as ``"    inet 10.0.3.5/24 brd 10.0.3.255 scope global eth0"``

    Returns:
        The address (e.g. '10.0.3.5') or None if no inet line is present
    """
    match = INET_PATTERN.search(output or "")
    return match.group(1) if match else None


class IpAddrStrategy:
    """Reads the global IPv4 address of an interface from inside the container."""

    def __init__(self, cli: LxcCli, interface: str = "eth0", ip_binary: str = "/sbin/ip"):
        self.cli = cli
        self.interface = interface
        self.ip_binary = ip_binary

    @property
    def command(self) -> List[str]:
        return [self.ip_binary, "-4", "addr", "show", "scope", "global", self.interface]

    def resolve(self) -> Optional[str]:
        """Return the container address, or None if none is assigned yet."""
        output = self.cli.attach(*self.command, namespaces="NETWORK")
        return parse_ipv4(output)
