import json
import logging
import os

import pytest

from flowdev.generator import (
    ContractTemplate,
    FileTemplate,
    FlowConfig,
    Generator,
    GeneratorError,
    ScriptTemplate,
    TestTemplate,
    TransactionTemplate,
    add_cdc_extension,
    render_template,
    strip_cdc_extension,
)

CONTRACT_CONTENT = """access(all)
contract TestContract {
    init() {}
}"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = FlowConfig({"contracts": {}}, "flow.json")
    return config


def _read(path):
    with open(path, encoding="utf-8") as handle:
        return handle.read().replace("\r\n", "\n")


def test_generate_new_contract(project):
    item = ContractTemplate("TestContract")
    g = Generator("", project, disable_logs=False, save_state=True)
    g.create(item)
    assert item.target_path() == os.path.join("cadence", "contracts", "TestContract.cdc")
    assert _read(item.target_path()) == CONTRACT_CONTENT

    with pytest.raises(GeneratorError) as info:
        Generator("", project).create(ContractTemplate("TestContract"))
    expected = "file already exists: " + os.path.join("cadence", "contracts", "TestContract.cdc")
    assert str(info.value) == expected


def test_generate_contract_with_account(project):
    item = ContractTemplate("TestContract", account="example-account")
    Generator("", project).create(item)
    assert item.target_path() == os.path.join(
        "cadence", "contracts", "example-account", "TestContract.cdc"
    )
    assert _read(item.target_path()) == CONTRACT_CONTENT


def test_generate_new_contract_skip_tests(project):
    Generator("", project).create(ContractTemplate("TestContract", skip_tests=True))
    assert _read(os.path.join("cadence", "contracts", "TestContract.cdc")) == CONTRACT_CONTENT
    assert not os.path.exists(os.path.join("cadence", "tests", "TestContract_test.cdc"))
    assert project.data["contracts"]["TestContract"] == os.path.join(
        "cadence", "contracts", "TestContract.cdc"
    )


def test_generate_contract_creates_test_and_alias(project):
    Generator("", project).create(ContractTemplate("Foo"))
    test_content = _read(os.path.join("cadence", "tests", "Foo_test.cdc"))
    assert 'name: "Foo"' in test_content
    assert project.data["contracts"]["Foo"] == {
        "source": os.path.join("cadence", "contracts", "Foo.cdc"),
        "aliases": {"testing": "0x0000000000000007"},
    }


def test_generate_new_contract_with_file_extension(project):
    item = ContractTemplate("TestContract.cdc")
    Generator("", project).create(item)
    assert item.target_path() == os.path.join("cadence", "contracts", "TestContract.cdc")
    assert _read(item.target_path()) == CONTRACT_CONTENT


def test_generate_new_script(project):
    item = ScriptTemplate("TestScript")
    Generator("", project).create(item)
    assert item.target_path() == os.path.join("cadence", "scripts", "TestScript.cdc")
    assert _read(item.target_path()) == (
        "access(all)\nfun main() {\n    // Script details here\n}"
    )


def test_generate_new_transaction(project):
    item = TransactionTemplate("TestTransaction")
    Generator("", project).create(item)
    assert item.target_path() == os.path.join("cadence", "transactions", "TestTransaction.cdc")
    assert _read(item.target_path()) == (
        "transaction() {\n    prepare(account: &Account) {}\n\n    execute {}\n}"
    )


def test_generate_new_with_dir(project):
    item = ContractTemplate("TestContract")
    Generator("customDir", project).create(item)
    target = os.path.join("customDir", item.target_path())
    assert target == os.path.join("customDir", "cadence", "contracts", "TestContract.cdc")
    assert _read(target) == CONTRACT_CONTENT


def test_generate_test_template(project):
    item = TestTemplate(
        "Foobar",
        template="contract_init_test.cdc.tmpl",
        values={"ContractName": "Foobar"},
    )
    Generator("", project).create(item)
    expected = """import Test

access(all) let account = Test.createAccount()

access(all) fun testContract() {
    let err = Test.deployContract(
        name: "Foobar",
        path: "../contracts/Foobar.cdc",
        arguments: [],
    )

    Test.expect(err, Test.beNil())
}"""
    assert item.target_path() == os.path.join("cadence", "tests", "Foobar_test.cdc")
    assert _read(item.target_path()) == expected


def test_file_template_from_disk(project, tmp_path):
    template = tmp_path / "notes.tmpl"
    template.write_text("{% for c in Contracts %}- {{ c.Name }}\n{% endfor %}", encoding="utf-8")
    item = FileTemplate(str(template), "NOTES.md", {"Contracts": [{"Name": "A"}, {"Name": "B"}]})
    Generator("", project).create(item)
    assert item.target_path() == "NOTES.md"
    assert _read(item.target_path()) == "- A\n- B\n"


def test_save_state_writes_config(project):
    Generator("", project).create(ContractTemplate("Saved", skip_tests=True, save_state=True))
    expected = os.path.join("cadence", "contracts", "Saved.cdc")
    assert project.data["contracts"]["Saved"] == expected
    with open("flow.json", encoding="utf-8") as handle:
        saved = json.load(handle)
    assert saved["contracts"]["Saved"] == expected


def test_logs_generated_file(project, caplog):
    logger = logging.getLogger("flowdev.test")
    with caplog.at_level(logging.INFO, logger="flowdev.test"):
        Generator("", project, logger).create(ScriptTemplate("Logged"))
    assert "Generated new script: " + os.path.join("cadence", "scripts", "Logged.cdc") in caplog.text


def test_disable_logs(project, caplog):
    logger = logging.getLogger("flowdev.quiet")
    with caplog.at_level(logging.INFO, logger="flowdev.quiet"):
        Generator("", project, logger, True).create(ScriptTemplate("Quiet"))
    assert caplog.text == ""


def test_unknown_template_raises(project):
    with pytest.raises(GeneratorError, match="error generating file template"):
        Generator("", project).create(FileTemplate("missing.tmpl", "out.txt"))
    assert not os.path.exists("out.txt")


def test_render_template_parse_error(tmp_path):
    broken = tmp_path / "broken.tmpl"
    broken.write_text("{% for %}", encoding="utf-8")
    with pytest.raises(GeneratorError, match="failed to parse template"):
        render_template(str(broken), {})


def test_render_builtin_template():
    assert render_template("contract_init.cdc.tmpl", {"Name": "X"}) == (
        "access(all)\ncontract X {\n    init() {}\n}"
    )


@pytest.mark.parametrize(
    "name, added, stripped",
    [("Foo", "Foo.cdc", "Foo"), ("Foo.cdc", "Foo.cdc", "Foo"), ("a.b", "a.b.cdc", "a.b")],
)
def test_cdc_extension(name, added, stripped):
    assert add_cdc_extension(name) == added
    assert strip_cdc_extension(name) == stripped


def test_flow_config_round_trip(tmp_path):
    path = tmp_path / "flow.json"
    config = FlowConfig({"networks": {"emulator": "127.0.0.1:3569"}}, str(path))
    config.add_or_update_contract("Hello", "Hello.cdc", {"testnet": "0x01"})
    config.save()
    loaded = FlowConfig.load(str(path))
    assert loaded.data == {
        "networks": {"emulator": "127.0.0.1:3569"},
        "contracts": {"Hello": {"source": "Hello.cdc", "aliases": {"testnet": "0x01"}}},
    }
    assert loaded.path == str(path)


def test_flow_config_load_missing(tmp_path):
    with pytest.raises(GeneratorError, match="could not read configuration"):
        FlowConfig.load(str(tmp_path / "absent.json"))


def test_contract_children_and_targets():
    contract = ContractTemplate("Foo", values={"Extra": 1})
    assert contract.data() == {"Name": "Foo", "Extra": 1}
    assert contract.children() == [
        TestTemplate("Foo", template="contract_init_test.cdc.tmpl", values={"ContractName": "Foo"})
    ]
    assert ContractTemplate("Foo", skip_tests=True).children() == []
    assert TestTemplate("Foo").template_path() == "empty_test.cdc.tmpl"
    assert TestTemplate("Foo").target_path() == os.path.join("cadence", "tests", "Foo_test.cdc")