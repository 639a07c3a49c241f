"""Shared utilities for lxcpilot CLI commands."""
from __future__ import annotations

import time
from typing import Dict, List, Optional

import typer
from rich.console import Console

from lxcpilot.models.container import Customization, SharedFolder
from lxcpilot.services.lxc import LxcDriver


def build_driver(name: Optional[str] = None) -> LxcDriver:
    """Create a driver for ``name`` using the global configuration."""
    return LxcDriver(name)


def generate_name(base: str = "lxcpilot") -> str:
    """Return a container name unique to the current millisecond."""
    return f"{base}-{int(time.time() * 1000)}"


def parse_key_values(items: Optional[List[str]], param_hint: str) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict (later keys win)."""
    parsed: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint=param_hint)
        key, value = item.split("=", 1)
        parsed[key] = value
    return parsed


def parse_customizations(items: Optional[List[str]]) -> List[Customization]:
    """Parse repeated KEY=VALUE options into ordered customizations."""
    customizations: List[Customization] = []
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="'--set'")
        key, value = item.split("=", 1)
        customizations.append(Customization(key, value))
    return customizations


def parse_shares(items: Optional[List[str]]) -> List[SharedFolder]:
    """Parse repeated HOST:GUEST options into shared folders."""
    folders: List[SharedFolder] = []
    for item in items or []:
        hostpath, sep, guestpath = item.partition(":")
        if not sep or not hostpath or not guestpath:
            raise typer.BadParameter(f"Expected HOST:GUEST, got {item!r}", param_hint="'--share'")
        folders.append(SharedFolder(hostpath=hostpath, guestpath=guestpath))
    return folders


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting.

    Args:
        console: Rich console for output
        message: Error message
        prefix: Prefix symbol (default: ✗)
    """
    console.print(f"[red]{prefix}[/red] {message}")
