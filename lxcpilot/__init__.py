"""lxcpilot - lifecycle driver for LXC system containers."""

__version__ = "0.1.0"
