# flowdev

Tools for working on a Flow project from Python and the command line:

- generate Cadence contracts, scripts, transactions and tests from built-in
  templates, and register new contracts in `flow.json`;
- find the Cadence files of a project, work out which account each contract
  belongs to, and watch the contracts folder for changes;
- format deployment reports and network status for the terminal.

## Installation

```
pip install flowdev
```

To run the test suite, install the `test` extra and run `pytest`.

## Command line

Run these commands from the root of a project, where `flow.json` lives:

```
flowdev generate contract HelloWorld
flowdev generate script GetCounter
flowdev generate transaction IncrementCounter
flowdev generate test HelloWorld
```

`g` is accepted as a short form of `generate`. Files go to
`cadence/contracts`, `cadence/scripts`, `cadence/transactions` and
`cadence/tests`. A name may be given with or without the `.cdc` extension;
for `test`, a trailing `_test` is dropped too, since it is added back to the
file name.

Generating a contract also creates a test for it and adds the contract to
`flow.json` with an alias for the `testing` network, then saves `flow.json`.
Pass `--skip-tests` to leave the test and the alias out. `--dir` writes the
files below another directory. An existing file is never overwritten: the
command prints an error and exits with status 1.

## Library use

Generating files:

```python
import logging

from flowdev.generator import ContractTemplate, FlowConfig, Generator, ScriptTemplate

config = FlowConfig.load("flow.json")
generator = Generator("", config, logging.getLogger("flowdev"))
generator.create(
    ContractTemplate("Counter", save_state=True),
    ScriptTemplate("GetCounter"),
)
```

`TransactionTemplate`, `TestTemplate` and `FileTemplate` work the same way.
Each takes an optional template name and a mapping of values for it; a
`FileTemplate` names its template and its target path explicitly. Template
names that are not built in are read as Jinja2 template files from disk.
`render_template` renders a template on its own, and `add_cdc_extension` /
`strip_cdc_extension` normalise file names. Failures raise `GeneratorError`.

`FlowConfig` holds the parsed `flow.json`; `add_or_update_contract` records
a contract and `save` writes the file back.

Inspecting project files:

```python
from flowdev.files import ProjectFiles, account_from_path

account_from_path("cadence/contracts/alice/Foo.cdc")   # ("alice", True)

files = ProjectFiles(".")
files.exist()
files.deployments()   # {"alice": ["cadence/contracts/alice/Foo.cdc"], ...}
```

`contracts`, `scripts` and `transactions` list project-relative paths of
`.cdc` files. `ProjectFiles.watch(interval, stop)` polls the contracts
folder and yields `AccountChange` and `ContractChange` events, each with a
`ChangeStatus`, until the `threading.Event` passed as `stop` is set.
Missing folders or configuration raise `ProjectFilesError`.

Reports:

- `flowdev.status.check_status(services)` calls `services.ping()` and
  `services.network()` and returns a `StatusResult` that prints as a small
  table, as a one-line `ONLINE`/`OFFLINE` via `oneliner()`, or as a
  dictionary via `to_json()`.
- `flowdev.output` formats deployment results with `successful_deployment`
  (taking `DeployedContract` values), explains errors, including
  `ProjectDeploymentError`, with `failure_deployment`, and writes a full
  report with `print_deployment`.

## What it does not do

The package does not create new projects or fetch project scaffolds, and it
does not talk to a Flow network itself: it does not deploy contracts, and
`check_status` relies on the services object it is given to do the ping.
There is no command for project setup, status or a development loop; the
only command is `flowdev generate`.