"""LXC container management.

This package keeps each concern in its own module:
- ProcessExecutor: Runs external commands, optionally through sudo
- LxcCli: Translates lifecycle intents into lxc-* commands
- PathResolver: Container, rootfs and template locations
- IpAddrStrategy: Reads the container address from ip output
- LxcDriver: Lifecycle driver (facade used by callers)
"""
from .executor import CommandResult, ProcessExecutor
from .cli import LxcCli
from .paths import PathResolver
from .address import IpAddrStrategy, parse_ipv4
from .driver import LxcDriver

__all__ = [
    'CommandResult',
    'ProcessExecutor',
    'LxcCli',
    'PathResolver',
    'IpAddrStrategy',
    'parse_ipv4',
    'LxcDriver',
]
