"""Reachability status of a Flow network."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

_GO_EMOJI = "🟢"
_STOP_EMOJI = "🔴"


def _paint(code: int, text: str) -> str:
    return f"\x1b[{code}m{text}\x1b[0m"


class _Network(Protocol):
    name: str
    host: str


class _Services(Protocol):
    def ping(self) -> None: ...

    def network(self) -> _Network: ...


@dataclass(frozen=True)
class StatusResult:
    """Outcome of pinging a network's access node."""

    network: str
    access_node: str
    error: BaseException | None = None

    def status(self) -> str:
        """``ONLINE`` when the ping succeeded, ``OFFLINE`` otherwise."""
        return "ONLINE" if self.error is None else "OFFLINE"

    def colored_status(self) -> str:
        """The status coloured green or red for a terminal."""
        return _paint(32 if self.error is None else 31, self.status())

    def icon(self) -> str:
        """An emoji standing for the status."""
        return _GO_EMOJI if self.error is None else _STOP_EMOJI

    def __str__(self) -> str:
        rows = [
            ("Status:", f"{self.icon()} {self.colored_status()}"),
            ("Network:", self.network),
            ("Access Node:", self.access_node),
        ]
        width = max(len(label) for label, _ in rows) + 1
        return "".join(f"{label.ljust(width)} {value}\n" for label, value in rows)

    def to_json(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "accessNode": self.access_node,
            "status": self.status(),
        }

    def oneliner(self) -> str:
        return self.status()


def check_status(services: _Services) -> StatusResult:
    """Ping the services' network and report whether it answered."""
    error: BaseException | None = None
    try:
        services.ping()
    except Exception as exc:  # any failure to ping means the network is offline
        error = exc
    network = services.network()
    return StatusResult(network.name, network.host, error)