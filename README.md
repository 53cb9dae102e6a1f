# apiqube

Building blocks for declarative API testing: load YAML test manifests, work
out which tests depend on which, order them into parallel waves, check
response values against expectations, and route run events to subscribers.

## Installation

```
pip install apiqube
```

For running the test suite:

```
pip install "apiqube[test]"
pytest
```

## Writing manifests

Tests can be written in three forms, which may be mixed freely:

```yaml
target: http://api.example.com
mode: test
tests:
  # one-liner
  - "GET /health -> 200"

  # compact form: METHOD RESOURCE as the key
  - "POST /users":
      body:
        name: alice
      expect:
        status: 201

  # full form
  - name: get user
    alias: user
    method: GET
    resource: /users/1
    expect:
      status: 200
      body:
        id: "> 0"
        email: "contains @"
```

Fields that are not core test case fields (such as `body` or `query`) are
kept in `TestCase.extra`. Several documents separated by `---` become several
`TestFile` objects; empty documents are skipped. `mode` must be `test`,
`scenario` or `load` when given. With `mode: scenario`, each test runs after
the previous one in the same file.

## Parsing and planning

```python
from apiqube.parser import Parser
from apiqube.builder import Builder

files = Parser().parse_paths("./tests/")
plan = Builder().build(files)

for wave in plan.waves:
    print(wave.index, wave.parallel, [ref.test.name for ref in wave.tests])
```

Directories are walked recursively for `.yaml` and `.yml` files.
`Parser().parse_bytes(data)` and `Parser().parse_reader(stream)` accept YAML
held in memory. Malformed YAML or an invalid test entry raises `ParseError`;
a missing path raises `FileNotFoundError`.

A test that refers to `{{ user.id }}` runs after the test with alias `user`;
`depends: [user]` states the same thing explicitly. References under `fake.`,
`env.` and `regex(...)` create no dependency. Duplicate aliases and explicit
dependencies on unknown aliases raise `GraphError`; dependency cycles raise
`CycleError`, whose `cycle` lists the tests involved. `plan.dependencies`
holds every edge, and `plan.save_requirements` tells each producing test (by
`TestRef.id()`) which paths its consumers read.

`apiqube.references.extract_references` and `apiqube.toposort.toposort` are
available on their own as well.

### Input sources

`apiqube.inputs` wraps the three ways of supplying manifests:

```python
from apiqube.inputs import from_bytes, from_paths, load_input

files = load_input(from_bytes(b'tests:\n  - "GET / -> 200"\n'))
files = load_input(from_paths("./tests/"))
```

`load_input(None)` raises `NoInputError`. `with_check_config_path` and
`with_check_plugins` return options that set the fields of a `CheckConfig`.

## Assertions

```python
from apiqube.assertion import Engine

checker = Engine()
checker.check("status", 200, 200).passed               # True
checker.check("body.age", "> 18", 25).passed           # True
checker.check("body.code", {"oneOf": [200, 201]}, 201).passed
checker.check("body.id", "is integer", "42").passed    # True
```

String operators: `>`, `>=`, `<`, `<=`, `==`, `!=`, `contains`, `matches`,
`is`, `exists`. Map operators (a mapping with a single key): `eq`, `ne`,
`gt`, `gte`, `lt`, `lte`, `contains`, `matches`, `is`, `exists`,
`notExists`, `oneOf`. Numbers and numeric strings compare as numbers;
booleans equal only booleans; `None` equals only `None`. A failed check
carries a readable `message` instead of raising. The helpers
`parse_operator`, `operator_from_map`, `run_operator`, `equal`, `to_float`
and `to_string` are public.

## Pulling values out of responses

```python
from apiqube.extract import extract

body = {"items": [{"id": 1}, {"id": 2}]}
extract(body, "items.1.id")      # 2
extract(body, "items.length")    # 2
```

A missing key, an index out of range or an unsupported step raises
`ExtractError`.

## Sharing data between tests

`apiqube.store.Store` holds saved values, the `prev` snapshot and per-alias
plugin events for one run. `get` raises `KeyError` for an unset key.
`wait_for(key, timeout)` blocks until another thread sets the key; it raises
`TimeoutError` when the timeout passes and `StoreClosedError` when the store
is closed. The store can be used as a context manager, which closes it.

## Events

Run progress is described by event objects in `apiqube.events`:
`RunStarted`, `RunCompleted`, `WaveStarted`, `TestStarted`, `GraphResolved`,
`PluginLoaded`, `ConfigLoaded`, `TemplateError`, `Progress` and
`PluginEvent`. `NopHandler` discards events. A `Dispatcher` routes them to
subscribers:

```python
from dataclasses import dataclass

from apiqube.dispatcher import Dispatcher
from apiqube.events import PluginEvent, Progress

@dataclass
class StreamError:
    stream_id: str = ""

d = Dispatcher()
d.subscribe(Progress, lambda e: print(e.completed, "/", e.total))
d.subscribe_plugin_event("grpc.StreamError", lambda e: print(e.data))
d.subscribe_plugin_typed("grpc.StreamError", StreamError, lambda e: print(e.stream_id))
d.handle(PluginEvent(plugin="grpc", kind="StreamError", data={"stream_id": "s1"}))
```

Typed plugin handlers receive the event data decoded into the given factory;
if decoding fails the handler does not fire.

## Result records

`apiqube.data` has `RequestData`, `ResponseData` and `AssertionResult` for
recording what was sent, what came back and how each assertion fared.

## Configuration

```python
from apiqube.config import load

cfg = load(".qube.yaml")
print(cfg.runner.parallel, cfg.output.format)
```

`load("")` returns `None`; a missing file raises `FileNotFoundError`, and
malformed YAML raises `ConfigError`. `load_reader(stream)` parses from a
file-like object. Without a `runner` section the runner is parallel; without
an `output` section the format is `OutputFormat.PRETTY`.

## What this package does not do

It does not execute tests. There is no runner that sends requests, no
protocol plugins, no retry or load-test execution, and no command-line tool:
the package parses, plans and checks, and leaves running requests and
emitting events to the code that uses it.