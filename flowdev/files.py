"""Discovery and watching of Cadence files inside a Flow project."""

from __future__ import annotations

import enum
import os
import threading
from dataclasses import dataclass
from typing import Iterator, Union

CADENCE_DIR = "cadence"
CONTRACT_DIR = "contracts"
SCRIPT_DIR = "scripts"
TRANSACTION_DIR = "transactions"
CADENCE_EXT = ".cdc"
CONFIG_PATH = "flow.json"


class ChangeStatus(enum.IntEnum):
    """Kind of change observed on a watched path."""

    CREATED = 1
    REMOVED = 2
    CHANGED = 3
    RENAMED = 4


@dataclass(frozen=True)
class AccountChange:
    """A change to an account folder inside the contracts folder."""

    status: ChangeStatus
    name: str


@dataclass(frozen=True)
class ContractChange:
    """A change to a contract file."""

    status: ChangeStatus
    path: str
    old_path: str = ""
    account: str = ""


class ProjectFilesError(Exception):
    """Raised when project files are missing or cannot be resolved."""


def _ext(path: str) -> str:
    """Return the extension of the last path element, dot included."""
    base = path.rsplit(os.sep, 1)[-1]
    if os.altsep:
        base = base.rsplit(os.altsep, 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def account_from_path(path: str) -> tuple[str, bool]:
    """Extract the account name from a project relative path.

    A folder directly inside ``cadence/contracts`` names an account, so both
    ``cadence/contracts/alice`` and ``cadence/contracts/alice/Foo.cdc`` belong
    to ``alice``. Returns ``("", False)`` when the path names no account.
    """
    parts = path.split(os.sep)
    if parts[:2] != [CADENCE_DIR, CONTRACT_DIR]:
        return "", False

    if len(parts) == 4 and parts[2] and parts[3].endswith(CADENCE_EXT):
        return parts[2], True

    if len(parts) == 3 and parts[2]:
        if _ext(path):
            return "", False
        return parts[2], True

    return "", False


@dataclass(frozen=True)
class _Entry:
    is_dir: bool
    size: int
    mtime_ns: int
    device: int
    inode: int

    def same_file(self, other: "_Entry") -> bool:
        return (
            self.is_dir == other.is_dir
            and self.inode == other.inode
            and self.device == other.device
        )


@dataclass(frozen=True)
class _Event:
    op: ChangeStatus
    path: str
    old_path: str
    is_dir: bool


def _walk_files(root: str) -> Iterator[str]:
    """Yield file paths below ``root`` in lexical order, depth first."""
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except (FileNotFoundError, NotADirectoryError):
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(entry.path)
        else:
            yield entry.path


def _snapshot(root: str) -> dict[str, _Entry]:
    """Record every path below ``root`` with the details used to spot changes."""
    found: dict[str, _Entry] = {}

    def visit(directory: str) -> None:
        try:
            entries = list(os.scandir(directory))
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            return
        for entry in entries:
            try:
                info = entry.stat(follow_symlinks=False)
                is_dir = entry.is_dir(follow_symlinks=False)
            except FileNotFoundError:
                continue
            found[entry.path] = _Entry(
                is_dir, info.st_size, info.st_mtime_ns, info.st_dev, info.st_ino
            )
            if is_dir:
                visit(entry.path)

    visit(root)
    return found


def _diff(old: dict[str, _Entry], new: dict[str, _Entry]) -> list[_Event]:
    """Compare two snapshots and list the changes between them."""
    removed = {path: entry for path, entry in old.items() if path not in new}
    created = {path: entry for path, entry in new.items() if path not in old}
    events: list[_Event] = []

    fresh: list[tuple[str, _Entry]] = []
    for path, entry in sorted(created.items()):
        origin = next(
            (p for p, e in sorted(removed.items()) if e.same_file(entry)), None
        )
        if origin is None:
            fresh.append((path, entry))
            continue
        del removed[origin]
        events.append(_Event(ChangeStatus.RENAMED, path, origin, entry.is_dir))

    events.extend(
        _Event(ChangeStatus.CREATED, path, "", entry.is_dir) for path, entry in fresh
    )
    events.extend(
        _Event(ChangeStatus.REMOVED, path, "", entry.is_dir)
        for path, entry in sorted(removed.items())
    )
    for path in sorted(old.keys() & new.keys()):
        before, after = old[path], new[path]
        if after.is_dir:
            continue
        if before.mtime_ns != after.mtime_ns or before.size != after.size:
            events.append(_Event(ChangeStatus.CHANGED, path, "", False))
    return events


class ProjectFiles:
    """Cadence files of a project rooted at a directory."""

    def __init__(self, project_path: str) -> None:
        self.cadence_path = os.path.join(project_path, CADENCE_DIR)

    def exist(self) -> None:
        """Check that the folders and configuration a project needs are present."""
        if not os.path.exists(self.cadence_path):
            if not os.path.exists(CONTRACT_DIR):
                raise ProjectFilesError(
                    "required cadence folder or contract folder does not exist"
                )
            # without a cadence folder the contracts folder is used directly
            self.cadence_path = ""
        if not os.path.exists(CONFIG_PATH):
            raise ProjectFilesError(
                "required project configuration ('flow.json') does not exist"
            )

    def contracts(self) -> list[str]:
        """Project relative paths of all contracts."""
        return self._cadence_filepaths(CONTRACT_DIR)

    def deployments(self) -> dict[str, list[str]]:
        """Map account names to the contracts kept in their folders."""
        try:
            contracts = self.contracts()
        except ProjectFilesError as exc:
            raise ProjectFilesError(
                f"failed to get contracts in deployment: {exc}"
            ) from exc

        grouped: dict[str, list[str]] = {}
        for path in contracts:
            account, _ = account_from_path(path)
            grouped.setdefault(account, []).append(path)
        return grouped

    def scripts(self) -> list[str]:
        """Project relative paths of all scripts."""
        return self._cadence_filepaths(SCRIPT_DIR)

    def transactions(self) -> list[str]:
        """Project relative paths of all transactions."""
        return self._cadence_filepaths(TRANSACTION_DIR)

    def rel_project_path(self, file: str) -> str:
        """Path of ``file`` relative to the project, the cadence folder included."""
        base = os.path.dirname(self.cadence_path) or os.curdir
        if os.path.isabs(base) != os.path.isabs(file):
            raise ProjectFilesError(
                f"failed getting project relative path: cannot make {file} "
                f"relative to {base}"
            )
        try:
            return os.path.relpath(file, base)
        except ValueError as exc:
            raise ProjectFilesError(
                f"failed getting project relative path: {exc}"
            ) from exc

    def watch(
        self, interval: float = 0.5, stop: threading.Event | None = None
    ) -> Iterator[Union[AccountChange, ContractChange]]:
        """Poll the contracts folder and yield account and contract changes.

        The folder state is recorded when this is called; the returned
        iterator ends once ``stop`` is set.
        """
        root = os.path.join(self.cadence_path, CONTRACT_DIR)
        if not os.path.exists(root):
            raise ProjectFilesError(
                f"add recursive files failed: {root} does not exist"
            )
        snapshot = _snapshot(root)
        return self._changes(root, snapshot, interval, stop or threading.Event())

    def _changes(
        self,
        root: str,
        snapshot: dict[str, _Entry],
        interval: float,
        stop: threading.Event,
    ) -> Iterator[Union[AccountChange, ContractChange]]:
        while not stop.wait(interval):
            current = _snapshot(root)
            for event in _diff(snapshot, current):
                change = self._to_change(event)
                if change is not None:
                    yield change
            snapshot = current

    def _to_change(self, event: _Event) -> Union[AccountChange, ContractChange, None]:
        try:
            rel = self.rel_project_path(event.path)
        except ProjectFilesError:
            return None

        name, has_account = account_from_path(rel)
        if event.is_dir and has_account:
            return AccountChange(event.op, name)

        if _ext(rel) != CADENCE_EXT:
            return None

        old_path = ""
        if event.op is ChangeStatus.RENAMED:
            try:
                old_path = self.rel_project_path(event.old_path)
            except ProjectFilesError:
                return None

        return ContractChange(event.op, rel, old_path, name)

    def _cadence_filepaths(self, directory: str) -> list[str]:
        root = os.path.join(self.cadence_path, directory)
        return [
            self.rel_project_path(path)
            for path in _walk_files(root)
            if _ext(path) == CADENCE_EXT
        ]