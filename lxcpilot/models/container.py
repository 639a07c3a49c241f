"""Container configuration models."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Mapping, NamedTuple, Union


class LifecycleState(Enum):
    """Container state as reported by lxc-info."""
    NOT_CREATED = "not_created"
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    ABORTING = "aborting"
    FREEZING = "freezing"
    FROZEN = "frozen"
    THAWED = "thawed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "LifecycleState":
        """Map an lxc state word (e.g. 'RUNNING') to a LifecycleState."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def lxc_name(self) -> str:
        """State name as lxc-wait expects it."""
        return self.value.upper()


class Customization(NamedTuple):
    """A runtime config directive passed to lxc-start as ``-s key=value``."""
    key: str
    value: str

    def as_option(self) -> str:
        return f"{self.key}={self.value}"


@dataclass
class SharedFolder:
    """A host directory bind-mounted into the container."""
    hostpath: str
    guestpath: str

    @classmethod
    def coerce(cls, folder: Union["SharedFolder", Mapping[str, str]]) -> "SharedFolder":
        """Accept either a SharedFolder or a mapping with hostpath/guestpath."""
        if isinstance(folder, cls):
            return folder
        try:
            return cls(hostpath=str(folder["hostpath"]), guestpath=str(folder["guestpath"]))
        except KeyError as e:
            raise ValueError(f"Shared folder is missing {e.args[0]!r}: {folder!r}") from e


class CustomizationList:
    """Ordered, append-only collection of customizations.

    Entries are kept in insertion order and never deduplicated.
    """

    def __init__(self, items: Iterable[Customization] = ()):
        self._items: List[Customization] = [Customization(*item) for item in items]

    def add(self, key: str, value: str) -> Customization:
        item = Customization(key, value)
        self._items.append(item)
        return item

    def add_bind_mount(self, hostpath: str, guestpath: str) -> Customization:
        """Append a mount.entry bind mount of hostpath onto guestpath."""
        return self.add("mount.entry", f"{hostpath} {guestpath} none bind 0 0")

    def to_list(self) -> List[Customization]:
        return list(self._items)

    def __iter__(self) -> Iterator[Customization]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other) -> bool:
        if isinstance(other, CustomizationList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == [tuple(item) for item in other]
        return NotImplemented

    def __repr__(self) -> str:
        return f"CustomizationList({self._items!r})"
