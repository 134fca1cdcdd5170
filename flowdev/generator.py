"""Generation of Cadence source files from built-in templates."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

import jinja2

DEFAULT_CADENCE_DIRECTORY = "cadence"
DEFAULT_CONTRACT_DIRECTORY = "contracts"
DEFAULT_SCRIPT_DIRECTORY = "scripts"
DEFAULT_TRANSACTION_DIRECTORY = "transactions"
DEFAULT_TEST_DIRECTORY = "tests"
DEFAULT_TEST_ADDRESS = "0x0000000000000007"
DEFAULT_CONFIG_PATH = "flow.json"
TESTING_NETWORK = "testing"
CADENCE_EXT = ".cdc"

_TEMPLATES: dict[str, str] = {
    "contract_init.cdc.tmpl": (
        "access(all)\n"
        "contract {{ Name }} {\n"
        "    init() {}\n"
        "}"
    ),
    "script_init.cdc.tmpl": (
        "access(all)\n"
        "fun main() {\n"
        "    // Script details here\n"
        "}"
    ),
    "transaction_init.cdc.tmpl": (
        "transaction() {\n"
        "    prepare(account: &Account) {}\n"
        "\n"
        "    execute {}\n"
        "}"
    ),
    "contract_init_test.cdc.tmpl": (
        "import Test\n"
        "\n"
        "access(all) let account = Test.createAccount()\n"
        "\n"
        "access(all) fun testContract() {\n"
        "    let err = Test.deployContract(\n"
        '        name: "{{ ContractName }}",\n'
        '        path: "../contracts/{{ ContractName }}.cdc",\n'
        "        arguments: [],\n"
        "    )\n"
        "\n"
        "    Test.expect(err, Test.beNil())\n"
        "}"
    ),
    "empty_test.cdc.tmpl": (
        "import Test\n"
        "\n"
        "access(all) fun testExample() {\n"
        "    Test.assert(true)\n"
        "}"
    ),
}

_ENVIRONMENT = jinja2.Environment(keep_trailing_newline=True, autoescape=False)

_log = logging.getLogger(__name__)


class GeneratorError(Exception):
    """Raised when a template cannot be rendered or its file written."""


def add_cdc_extension(name: str) -> str:
    """Append the Cadence file extension unless it is already there."""
    return name if name.endswith(CADENCE_EXT) else name + CADENCE_EXT


def strip_cdc_extension(name: str) -> str:
    """Remove a trailing Cadence file extension."""
    return name.removesuffix(CADENCE_EXT)


def _template_source(template_path: str) -> str:
    if template_path in _TEMPLATES:
        return _TEMPLATES[template_path]
    try:
        with open(template_path, encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise GeneratorError(f"failed to read template file: {exc}") from exc


def render_template(template_path: str, data: Optional[Mapping[str, Any]] = None) -> str:
    """Render a built-in template, or a template file on disk, with ``data``."""
    source = _template_source(template_path)
    try:
        template = _ENVIRONMENT.from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise GeneratorError(f"failed to parse template: {exc}") from exc
    try:
        return template.render(dict(data or {}))
    except jinja2.TemplateError as exc:
        raise GeneratorError(f"failed to execute template: {exc}") from exc


@dataclass
class FlowConfig:
    """The project configuration kept in ``flow.json``."""

    data: dict[str, Any] = field(default_factory=dict)
    path: str = DEFAULT_CONFIG_PATH

    @classmethod
    def load(cls, path: str = DEFAULT_CONFIG_PATH) -> "FlowConfig":
        """Read the configuration stored at ``path``."""
        try:
            with open(path, encoding="utf-8") as handle:
                data = json.load(handle)
        except OSError as exc:
            raise GeneratorError(f"could not read configuration {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise GeneratorError(f"could not parse configuration {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise GeneratorError(f"could not parse configuration {path}: not an object")
        return cls(data, path)

    def add_or_update_contract(
        self, name: str, location: str, aliases: Optional[Mapping[str, str]] = None
    ) -> None:
        """Add a contract, replacing any contract of the same name."""
        contracts = self.data.setdefault("contracts", {})
        if aliases:
            contracts[name] = {"source": location, "aliases": dict(aliases)}
        else:
            contracts[name] = location

    def save(self, path: Optional[str] = None) -> None:
        """Write the configuration to ``path``, or where it was loaded from."""
        target = path or self.path
        try:
            with open(target, "w", encoding="utf-8") as handle:
                json.dump(self.data, handle, indent="\t")
                handle.write("\n")
        except OSError as exc:
            raise GeneratorError(f"could not write configuration {target}: {exc}") from exc


class TemplateItem:
    """A file to generate: its template, its data and where it goes."""

    def item_type(self) -> str:
        raise NotImplementedError

    def template_path(self) -> str:
        raise NotImplementedError

    def data(self) -> dict[str, Any]:
        raise NotImplementedError

    def target_path(self) -> str:
        raise NotImplementedError

    def update_state(self, config: FlowConfig) -> None:
        """Record the generated file in the configuration; nothing by default."""

    def children(self) -> list["TemplateItem"]:
        """Further items to generate after this one; none by default."""
        return []


@dataclass(frozen=True)
class ContractTemplate(TemplateItem):
    """A Cadence contract, with a test for it unless tests are skipped."""

    name: str
    account: str = ""
    template: str = ""
    values: Optional[Mapping[str, Any]] = None
    skip_tests: bool = False
    save_state: bool = False

    def item_type(self) -> str:
        return "contract"

    def template_path(self) -> str:
        return self.template or "contract_init.cdc.tmpl"

    def data(self) -> dict[str, Any]:
        return {"Name": self.name, **(self.values or {})}

    def target_path(self) -> str:
        return os.path.join(
            DEFAULT_CADENCE_DIRECTORY,
            DEFAULT_CONTRACT_DIRECTORY,
            self.account,
            add_cdc_extension(self.name),
        )

    def update_state(self, config: FlowConfig) -> None:
        """Register the contract, aliased on the testing network unless tests are skipped."""
        aliases = {} if self.skip_tests else {TESTING_NETWORK: DEFAULT_TEST_ADDRESS}
        config.add_or_update_contract(self.name, self.target_path(), aliases)
        if self.save_state:
            try:
                config.save()
            except GeneratorError as exc:
                raise GeneratorError(f"error saving to flow.json: {exc}") from exc

    def children(self) -> list[TemplateItem]:
        if self.skip_tests:
            return []
        return [
            TestTemplate(
                self.name,
                template="contract_init_test.cdc.tmpl",
                values={"ContractName": self.name},
            )
        ]


@dataclass(frozen=True)
class ScriptTemplate(TemplateItem):
    """A Cadence script."""

    name: str
    template: str = ""
    values: Optional[Mapping[str, Any]] = None

    def item_type(self) -> str:
        return "script"

    def template_path(self) -> str:
        return self.template or "script_init.cdc.tmpl"

    def data(self) -> dict[str, Any]:
        return dict(self.values or {})

    def target_path(self) -> str:
        return os.path.join(
            DEFAULT_CADENCE_DIRECTORY,
            DEFAULT_SCRIPT_DIRECTORY,
            add_cdc_extension(self.name),
        )


@dataclass(frozen=True)
class TransactionTemplate(TemplateItem):
    """A Cadence transaction."""

    name: str
    template: str = ""
    values: Optional[Mapping[str, Any]] = None

    def item_type(self) -> str:
        return "transaction"

    def template_path(self) -> str:
        return self.template or "transaction_init.cdc.tmpl"

    def data(self) -> dict[str, Any]:
        return dict(self.values or {})

    def target_path(self) -> str:
        return os.path.join(
            DEFAULT_CADENCE_DIRECTORY,
            DEFAULT_TRANSACTION_DIRECTORY,
            add_cdc_extension(self.name),
        )


@dataclass(frozen=True)
class TestTemplate(TemplateItem):
    """A Cadence test file named after what it tests."""

    __test__ = False

    name: str
    template: str = ""
    values: Optional[Mapping[str, Any]] = None

    def item_type(self) -> str:
        return "test"

    def template_path(self) -> str:
        return self.template or "empty_test.cdc.tmpl"

    def data(self) -> dict[str, Any]:
        return dict(self.values or {})

    def target_path(self) -> str:
        return os.path.join(
            DEFAULT_CADENCE_DIRECTORY,
            DEFAULT_TEST_DIRECTORY,
            add_cdc_extension(self.name + "_test"),
        )


@dataclass(frozen=True)
class FileTemplate(TemplateItem):
    """Any file rendered from a template to a chosen path."""

    template: str
    target: str
    values: Optional[Mapping[str, Any]] = None

    def item_type(self) -> str:
        return "file"

    def template_path(self) -> str:
        return self.template

    def data(self) -> dict[str, Any]:
        return dict(self.values or {})

    def target_path(self) -> str:
        return self.target


class Generator:
    """Writes template items below a directory and records them in the configuration."""

    def __init__(
        self,
        directory: str,
        config: FlowConfig,
        logger: Optional[logging.Logger] = None,
        disable_logs: bool = False,
        save_state: bool = True,
    ) -> None:
        self.directory = directory
        self.config = config
        self.logger = logger or _log
        self.disable_logs = disable_logs
        self.save_state = save_state

    def create(self, *args: TemplateItem) -> None:
        """Generate each item followed by its children, stopping at the first error."""
        self._create_all(args)

    def _create_all(self, items: Iterable[TemplateItem]) -> None:
        for item in items:
            self._generate(item)
            self._create_all(item.children())

    def _generate(self, item: TemplateItem) -> None:
        try:
            content = render_template(item.template_path(), item.data())
        except GeneratorError as exc:
            raise GeneratorError(
                f"error generating {item.item_type()} template: {exc}"
            ) from exc

        target = os.path.join(self.directory, item.target_path())
        if os.path.exists(target):
            raise GeneratorError(f"file already exists: {target}")

        try:
            parent = os.path.dirname(target)
            if parent:
                os.makedirs(parent, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise GeneratorError(f"error creating directories: {exc}") from exc

        try:
            with open(target, "w", encoding="utf-8") as handle:
                handle.write(content)
        except OSError as exc:
            raise GeneratorError(f"error writing file: {exc}") from exc

        if not self.disable_logs:
            self.logger.info("Generated new %s: %s", item.item_type(), target)

        item.update_state(self.config)