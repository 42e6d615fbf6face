# composetools

Building blocks for command-line tools that drive containers with compose.
The package uses only the standard library.

## What is in it

- **Progress events**: `composetools.event` defines `Event`, `EventStatus`
  (`WORKING`, `DONE`, `ERROR`), a `Spinner`, and helpers that build common
  events: `creating_event`, `created_event`, `starting_event`,
  `started_event`, `restarting_event`, `restarted_event`, `running_event`,
  `stopping_event`, `stopped_event`, `killing_event`, `killed_event`,
  `removing_event`, `removed_event`, `error_event` and `error_message_event`.
- **Progress writers**: `composetools.writer.new_writer(out)` returns a
  `TtyWriter` (from `composetools.tty`) when `out` is a terminal. That writer
  redraws a live status block every 100 ms. For any other stream it returns a
  `PlainWriter` (from `composetools.plain`), which prints one line per event.
  `composetools.noop.NoopWriter` discards everything.
- **Running work with progress**: `composetools.writer.run(func)` and
  `run_with_status(func)` start a writer on stderr, call `func`, stop the
  writer, and return what `func` returned (`run_with_status` only). Inside
  `func`, `context_writer()` returns the active writer. Outside any run it
  returns a `NoopWriter`. `with_context_writer(writer)` is a context manager
  that sets the current writer yourself.
- **Log printing**: `composetools.logprinter.LogPrinter` takes
  `ContainerEvent`s through `handle_event` and passes them to a `LogConsumer`
  (an object with `log`, `status` and `register` methods). The event types
  are `ATTACH`, `LOG`, `EXIT` and `USER_CANCEL`. `run(cascade_stop,
  exit_code_from, stop_fn, cancel=None)` processes events until the last
  attached container exits, then returns the exit code. With `cascade_stop`,
  the first exit calls `stop_fn`. The exit code comes from the service named
  by `exit_code_from`, or from the first service to exit if none is named.
  `cancel()` stops further log and status output.
- **Line splitting**: `composetools.splitwriter.get_writer(consumer)` returns a
  `SplitWriter`. It gathers written bytes and calls `consumer` once for each
  complete line. On `close()`, or when a `with` block ends, it passes on any
  partial line still left.
- **String helpers**: `composetools.stringutils.string_contains(array, needle)`.
- **Prompts**: `composetools.prompt.User` offers `select` (a numbered list),
  `input`, `confirm` and `password`. It reads from and writes to the given
  `stdin`/`stdout` streams, or to the process's own streams by default.
- **Scan suggestion**: `composetools.scan_suggest.display_scan_suggest_msg()`
  prints `SCAN_SUGGEST_MSG`. It stays silent in any of these cases:
  - `DOCKER_SCAN_SUGGEST` is `false`;
  - no `docker-scan` CLI plugin is found;
  - the scan plugin's `config.json` already records an opt-in.

  The configuration directory is `$DOCKER_CONFIG`, or `~/.docker` if that is
  not set (`config_dir()`).
- **End-to-end testing**: `composetools.e2e.new_e2e_cli(bin_dir)` creates an
  `E2eCLI` with a fresh temporary configuration directory. If a
  `docker-compose` plugin binary is found in `../../bin` or `../../../bin`,
  it is copied into that directory. The `E2eCLI` methods:
  - `run_docker_cmd` and `run_cmd` raise `AssertionError` when the command fails;
  - `run_docker_or_exit_error` returns the result whatever the exit code;
  - `wait_for_cmd_result` and `wait_for_condition` retry until a predicate holds,
    and raise `TimeoutError` if it never does.

  Results are `CommandResult`s, with `stdout`, `stderr`, `exit_code` and
  `combined()`. The module also has `run_command`, `http_get_with_retry`,
  `stdout_contains`, `lines`, `find_executable`, `copy_file` and
  `dir_contents`.

## Installation

```
pip install composetools
```

To install with the test dependencies:

```
pip install "composetools[test]"
```

## Examples

Reporting progress:

```python
from composetools.event import started_event
from composetools.writer import context_writer, run


def work():
    w = context_writer()
    w.event(started_event("Container web-1"))


run(work)
```

Splitting a byte stream into lines:

```python
from composetools.splitwriter import get_writer

lines = []
with get_writer(lines.append) as w:
    w.write(b"hello\nwor")
    w.write(b"ld!\n")
assert lines == ["hello", "world!"]
```

## What it does not do

This is a library, with no command of its own. It does not talk to a
container engine. It does not list, start, stop, pull or push containers or
images, and it does not read compose files. The `e2e` helpers only run
external commands, such as `docker`, that must already be installed.