"""Terminal reports for the development loop's deployments."""

from __future__ import annotations

import random
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Iterable, Mapping, Optional

_OK_FACES = (
    "😎", "🤩", "🤠", "🤖", "🤡", "👽", "👾", "🥸",
    "🧐", "👻", "💩", "🤓", "🥳", "🤑", "😍", "👿",
)
_ERROR_EMOJI = "❌"
_TRY_EMOJI = "🙏"
_CLEAR_SCREEN = "\x1b[H\x1b[2J"

_IMPORT_ERROR = re.compile(
    r"import from (\w*) could not be found: (\w*), make sure import path is correct",
    re.ASCII,
)
_DEPLOY_NOISE = re.compile(
    r"(failed to deploy.*contracts\.add[^\n]*\n[^\n]*\n\nerror: )", re.DOTALL
)


def _paint(code: int, text: str) -> str:
    return f"\x1b[{code}m{text}\x1b[0m"


def _bold(text: str) -> str:
    return _paint(1, text)


def _italic(text: str) -> str:
    return _paint(3, text)


def _red(text: str) -> str:
    return _paint(31, text)


def _green(text: str) -> str:
    return _paint(32, text)


def _magenta(text: str) -> str:
    return _paint(35, text)


@dataclass(frozen=True)
class DeployedContract:
    """A contract deployed to an account."""

    name: str
    account_name: str
    account_address: str
    location: str


class ProjectDeploymentError(Exception):
    """Deployment of one or more contracts failed."""

    def __init__(self, contracts: Mapping[str, object]) -> None:
        self.contracts = dict(contracts)
        super().__init__(
            "failed deploying contracts: " + ", ".join(self.contracts)
        )


def _find_deployment_error(error: BaseException) -> Optional[ProjectDeploymentError]:
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if isinstance(current, ProjectDeploymentError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def successful_deployment(deployed: Iterable[DeployedContract]) -> str:
    """Describe deployed contracts grouped by the account holding them."""
    grouped: dict[str, list[str]] = {}
    for contract in deployed:
        address = contract.account_address.removeprefix("0x")
        key = f"{contract.account_name} 0x{address}"
        grouped.setdefault(key, []).append(
            f"    |- {_bold(_magenta(contract.name))}  {_italic(contract.location)}"
        )

    parts = []
    for account, lines in grouped.items():
        parts.append(f"\n{random.choice(_OK_FACES)} {_bold(account)}\n")
        parts.extend(f"{line}\n" for line in lines)
    return "".join(parts)


def failure_deployment(
    error: BaseException, contract_path_names: Mapping[str, str]
) -> str:
    """Explain a deployment failure in terms a developer can act on."""
    message = str(error)
    parts: list[str] = []

    if "cannot overwrite existing contract with name" in message:
        parts.append(
            _ERROR_EMOJI
            + _red(
                " Cannot overwrite existing contract, that means you are running "
                "the emulator without the --contract-removal flag.\n"
            )
        )
        parts.append(
            _TRY_EMOJI
            + " Please restart the emulator with the --contract-removal flag present "
            "as we are required to continuously update contracts as you work."
        )

    found = _IMPORT_ERROR.search(message)
    if found:
        contract_name, import_name = found.group(1), found.group(2)
        contract_path = ""
        for path, name in contract_path_names.items():
            if name == contract_name:
                contract_path = path
        parts.append(
            _ERROR_EMOJI
            + _red(
                f" Error deploying your project. Import 'import {import_name}' found "
                f"in {contract_name} ({contract_path}) could not be resolved.\n"
            )
        )
        parts.append(
            "Only valid project imports are: "
            + ", ".join(contract_path_names.values())
            + ". If you want to import a contract outside your project you need to "
            "import it by specifying an address of already deployed contract, or by "
            "first transferring the contract file inside the project and then "
            "importing.\n"
        )
        return "".join(parts)

    deployment_error = _find_deployment_error(error)
    if deployment_error is not None:
        parts.append(
            _ERROR_EMOJI
            + " Error deploying your project. Runtime error encountered which means "
            "your code is incorrect, check details below. \n\n"
        )
        for name, contract_error in deployment_error.contracts.items():
            parts.append(_bold(f"{name} Errors:\n"))
            detail = str(contract_error)
            if "invalid argument count, too few arguments" in detail:
                parts.append(
                    _red(
                        "Deploying a contract failed because it requires "
                        "initialization arguments. We currently don't support passing "
                        "initialization arguments, so we suggest you hardcode the "
                        "initialization arguments in the init function to be used "
                        "during development.\n\n"
                    )
                )
                continue
            parts.append(_red(_DEPLOY_NOISE.sub("", detail)))
        return "".join(parts)

    return message


def help_banner() -> str:
    """Introductory text shown above every deployment report."""
    return (
        _italic(
            "The development environment will watch your Cadence files and "
            "automatically keep your project updated on the emulator.\n"
        )
        + _italic(
            "Please add your contracts in the contracts folder. Read more about it "
            "in the super commands section of the Flow CLI documentation.\n"
        )
        + _italic(
            "Be aware that resources stored in accounts might no longer be valid "
            "after contract code changes.\n\n"
        )
    )


def ok_banner(now: Optional[datetime] = None) -> str:
    """Banner announcing a synced project, stamped with the time."""
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    return _bold(f"{_green('OK')} Project synced [{stamp}]\n")


def error_banner(now: Optional[datetime] = None) -> str:
    """Banner announcing a project error, stamped with the time."""
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    return _bold(f"{_red('ERR')} Project error [{stamp}]\n")


def print_deployment(
    deployed: Iterable[DeployedContract],
    error: Optional[BaseException],
    contract_path_names: Mapping[str, str],
    stream: Optional[IO[str]] = None,
) -> None:
    """Clear the terminal and report the outcome of a deployment."""
    out = stream if stream is not None else sys.stdout
    out.write(_CLEAR_SCREEN)
    print(help_banner(), file=out)

    if error is not None:
        print(error_banner(), file=out)
        print(failure_deployment(error, contract_path_names), file=out)
        return

    print(ok_banner(), file=out)
    print(successful_deployment(deployed), file=out)