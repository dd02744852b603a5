# gadflow

gadflow is a small HTTP service that processes text by running a set of
steps. Steps may depend on one another, so together they form a directed
acyclic graph. All steps read from and write to one shared dictionary.
Steps that do not depend on each other run concurrently in a thread pool.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install ".[test]"
```

## Running the server

```
gadflow-server
gadflow-server --env-file path/to/settings.env
```

The server first reads a dotenv file (`.env` in the current directory by
default, or the file given with `--env-file`). If the file is missing, an
error is logged and startup continues. Variables in the process environment
take precedence over those in the file.

| Variable       | Default   | Meaning                 |
|----------------|-----------|-------------------------|
| `APP_ENV`      | (empty)   | Application environment |
| `HTTP_ADDRESS` | `0.0.0.0` | Address to bind to      |
| `HTTP_PORT`    | `8081`    | Port to listen on       |

An empty `HTTP_ADDRESS` or `HTTP_PORT` falls back to its default. If the
port is not a number, or the server cannot bind, the command logs the error
and exits with status 1. Log records are written to standard output as one
JSON object per line.

The server is Flask's built-in server started through `Flask.run`; the
package ships no production WSGI setup. To serve the application some other
way, build it with `gadflow.api.create_app(logger)`.

## Endpoints

Every endpoint accepts a JSON body of the form `{"text": "..."}`. The
`text` field is required and must be a non-empty string. Otherwise the
answer is `400` with `{"error": "invalid input"}`. If a step fails or a
result is missing, the answer is `500` with
`{"error": "failed to process input"}`.

| Endpoint                        | Steps run                                             | Response keys                                         |
|---------------------------------|-------------------------------------------------------|-------------------------------------------------------|
| `POST /trim`                    | trim                                                  | `trimmed_text`                                        |
| `POST /uppercase`               | trim, then uppercase                                  | `uppercased_text`                                     |
| `POST /uppercase-with-increase` | trim, then uppercase; increase                        | `uppercased_text`                                     |
| `POST /all`                     | trim, then uppercase and lowercase; reverse; increase | `uppercased_text`, `lowercased_text`, `reversed_text` |

The reverse step works on the original input, before any trimming. The
increase step adds one to the process-wide counter `Increase.count`.

Example request:

```
curl -X POST localhost:8081/all -H 'Content-Type: application/json' -d '{"text": "  Hello  "}'
```

## Using the library

```python
import logging

from gadflow.orchestrator import Orchestrator, step
from gadflow.workflow import Trim, Uppercase

shared = {"inputs": "  hello  "}
trim = Trim(shared)
upper = Uppercase(shared)

orchestrator = Orchestrator(
    logging.getLogger("demo"),
    step(trim),
    step(upper).depends_on(trim),
)
orchestrator.build()
orchestrator.run()
print(shared["uppercase"])  # HELLO
```

- `gadflow.orchestrator` provides `Step` (subclass it and implement `do`),
  `step` and `StepSpec.depends_on` for declaring dependencies, `Workflow`
  for running a graph directly, and `Orchestrator`.
- `gadflow.workflow` provides the steps `Trim`, `Uppercase`, `Lowercase`,
  `Reverse` and `Increase`, and the shared-dictionary keys `INPUT_KEY`,
  `TRIMMED_RESULT_KEY`, `UPPERCASE_KEY`, `LOWERCASE_RESULT_KEY` and
  `REVERSE_RESULT_KEY`.
- `gadflow.config.configure(env_file, environ)` returns a frozen `Config`
  holding an `AppConfig` and an `HttpConfig`.

A step runs only if all of its upstream steps succeeded; otherwise it is
skipped. If any step fails, the run raises `WorkflowError`, whose `errors`
maps each failed step to its exception and whose `skipped` lists the steps
that did not run. A dependency cycle also raises `WorkflowError`. Calling
`Orchestrator.run` before `Orchestrator.build` raises
`WorkflowNotBuiltError`. A text step that cannot find its input string
raises `InvalidInputError`.