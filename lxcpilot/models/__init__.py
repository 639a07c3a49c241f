"""Data models for lxcpilot."""
from lxcpilot.models.container import (
    Customization,
    CustomizationList,
    LifecycleState,
    SharedFolder,
)

__all__ = [
    'Customization',
    'CustomizationList',
    'LifecycleState',
    'SharedFolder',
]
