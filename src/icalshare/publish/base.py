"""Publisher contract shared by the storage backends."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Union


@dataclass(frozen=True)
class PublishResult:
    """Where a published calendar can be fetched."""

    url: str
    key: str
    backend: str


class Publisher(Protocol):
    """Makes a local file public under a stable identifier.

    Publishing the same identifier again replaces the previous content; the
    returned URL stays the same across runs.
    """

    def publish(self, path: Union[str, Path], identifier: str) -> PublishResult:
        ...
