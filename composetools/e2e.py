"""Helpers for driving the CLI in end-to-end tests."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
import time
import urllib.error
import urllib.request
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

DOCKER_EXECUTABLE_NAME = "docker.exe" if sys.platform == "win32" else "docker"

_EXE_SUFFIX = ".exe" if sys.platform == "win32" else ""
_PLUGIN_SEARCH_PATHS = ("../../bin", "../../../bin")


class Cmd(NamedTuple):
    """A command line and the environment it runs in."""

    command: list[str]
    env: dict[str, str]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a finished command."""

    command: list[str]
    exit_code: int
    stdout: str
    stderr: str

    def combined(self) -> str:
        """Return standard output followed by standard error."""
        return self.stdout + self.stderr


def run_command(command: Sequence[str], env: Mapping[str, str] | None = None) -> CommandResult:
    """Run ``command`` to completion and capture its output."""
    argv = list(command)
    try:
        proc = subprocess.run(
            argv,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        return CommandResult(argv, 127, "", str(exc))
    return CommandResult(argv, proc.returncode, proc.stdout, proc.stderr)


def _poll(check: Callable[[], tuple[bool, str]], timeout: float, delay: float) -> None:
    deadline = time.monotonic() + timeout
    while True:
        ok, description = check()
        if ok:
            return
        if time.monotonic() + delay > deadline:
            raise TimeoutError(f"timeout hit after {timeout}s: {description}")
        time.sleep(delay)


class E2eCLI:
    """Runs commands against an isolated CLI configuration directory."""

    def __init__(self, bin_dir: str, config_dir: str, name: str = "e2e") -> None:
        self.bin_dir = bin_dir
        self.config_dir = config_dir
        self.name = name

    def __enter__(self) -> E2eCLI:
        return self

    def __exit__(self, *args) -> None:
        self.cleanup()

    def new_cmd(self, command: str, *args: str) -> Cmd:
        """Build a command that runs with this configuration directory."""
        env = dict(os.environ)
        env["DOCKER_CONFIG"] = self.config_dir
        env["KUBECONFIG"] = "invalid"
        return Cmd([command, *args], env)

    def metrics_socket(self) -> str:
        """Path where test metrics are sent."""
        return os.path.join(self.config_dir, "docker-cli.sock")

    def new_docker_cmd(self, *args: str) -> Cmd:
        return self.new_cmd(DOCKER_EXECUTABLE_NAME, *args)

    def run_docker_or_exit_error(self, *args: str) -> CommandResult:
        """Run a docker command and return its result whatever the exit code."""
        print(f"\t[{self.name}] docker {' '.join(args)}")
        cmd = self.new_docker_cmd(*args)
        return run_command(cmd.command, cmd.env)

    def run_cmd(self, *args: str) -> CommandResult:
        """Run a command; raise AssertionError if it fails."""
        print(f"\t[{self.name}] {' '.join(args)}")
        if len(args) < 1:
            raise AssertionError("require at least one command in parameters")
        cmd = self.new_cmd(args[0], *args[1:])
        return _expect_success(run_command(cmd.command, cmd.env))

    def run_docker_cmd(self, *args: str) -> CommandResult:
        """Run a docker command; raise AssertionError if it fails."""
        return _expect_success(self.run_docker_or_exit_error(*args))

    def wait_for_cmd_result(
        self,
        command: Cmd,
        predicate: Callable[[CommandResult], bool],
        timeout: float,
        delay: float,
    ) -> CommandResult:
        """Rerun ``command`` until ``predicate`` holds for its result; raise TimeoutError otherwise."""
        if timeout <= delay:
            raise ValueError("timeout must be greater than delay")
        last: list[CommandResult] = []

        def check() -> tuple[bool, str]:
            print(f"\t[{self.name}] {' '.join(command.command)}")
            result = run_command(command.command, command.env)
            last[:] = [result]
            if predicate(result):
                return True, ""
            return False, f"Cmd output did not match requirement: {result.combined()!r}"

        _poll(check, timeout, delay)
        return last[0]

    def wait_for_condition(
        self,
        predicate: Callable[[], tuple[bool, str]],
        timeout: float,
        delay: float,
    ) -> None:
        """Wait until ``predicate`` reports success; raise TimeoutError otherwise."""

        def check() -> tuple[bool, str]:
            passed, description = predicate()
            return passed, f"Condition not met: {description!r}"

        _poll(check, timeout, delay)

    def cleanup(self) -> None:
        """Remove the configuration directory."""
        shutil.rmtree(self.config_dir, ignore_errors=True)


def _expect_success(result: CommandResult) -> CommandResult:
    if result.exit_code != 0:
        raise AssertionError(
            f"command {' '.join(result.command)} exited with code {result.exit_code}\n"
            f"{result.combined()}"
        )
    return result


def new_e2e_cli(bin_dir: str) -> E2eCLI:
    """Create a CLI wrapper with a fresh configuration directory holding the compose plugin."""
    directory = tempfile.mkdtemp()
    plugins = os.path.join(directory, "cli-plugins")
    os.makedirs(plugins, mode=0o755, exist_ok=True)
    compose_plugin_file = "docker-compose" + _EXE_SUFFIX
    scan_plugin_file = "docker-scan" + _EXE_SUFFIX
    try:
        compose_plugin = find_executable(compose_plugin_file, list(_PLUGIN_SEARCH_PATHS))
    except FileNotFoundError:
        print("WARNING: docker-compose cli-plugin not found")
    else:
        copy_file(compose_plugin, os.path.join(plugins, compose_plugin_file))
        # a valid plugin binary is enough for the scan plugin
        copy_file(compose_plugin, os.path.join(plugins, scan_plugin_file))
    return E2eCLI(bin_dir, directory)


def _walk(path: Path) -> Iterator[str]:
    yield str(path)
    if path.is_dir() and not path.is_symlink():
        for child in sorted(path.iterdir(), key=lambda p: p.name):
            yield from _walk(child)


def dir_contents(directory: str | os.PathLike[str]) -> list[str]:
    """List ``directory`` and everything below it, in lexical walk order."""
    return list(_walk(Path(directory)))


def find_executable(executable_name: str, paths: Sequence[str]) -> str:
    """Return the absolute path of the first ``executable_name`` found in ``paths``."""
    for candidate_dir in paths:
        candidate = os.path.abspath(os.path.join(candidate_dir, executable_name))
        if os.path.exists(candidate):
            return candidate
    raise FileNotFoundError(f"executable not found: {executable_name}")


def copy_file(source_file: str | os.PathLike[str], destination_file: str | os.PathLike[str]) -> None:
    """Copy a file and make the copy executable (mode 0755)."""
    shutil.copyfile(source_file, destination_file)
    os.chmod(destination_file, 0o755)


def stdout_contains(expected: str) -> Callable[[CommandResult], bool]:
    """Predicate on a command result expecting ``expected`` in its stdout."""
    return lambda result: expected in result.stdout


def lines(output: str) -> list[str]:
    """Split trimmed output into lines."""
    return output.strip().split("\n")


def http_get_with_retry(endpoint: str, expected_status: int, retry_delay: float, timeout: float) -> str:
    """GET ``endpoint`` until it answers with ``expected_status``; return the body.

    ``retry_delay`` is also the per-request timeout. Raises TimeoutError if the
    expected status is never seen.
    """
    print(f"\t[e2e] GET {endpoint}")
    body: list[str] = []

    def check() -> tuple[bool, str]:
        try:
            with urllib.request.urlopen(endpoint, timeout=retry_delay) as response:
                status = response.status
                content = response.read()
        except urllib.error.HTTPError as exc:
            status = exc.code
            content = exc.read()
        except (urllib.error.URLError, OSError) as exc:
            return False, f"reaching {endpoint!r}: Error {exc}"
        body[:] = [content.decode("utf-8", errors="replace")]
        if status == expected_status:
            return True, ""
        return False, f"reaching {endpoint!r}: {status} != {expected_status}"

    _poll(check, timeout, retry_delay)
    return body[0] if body else ""