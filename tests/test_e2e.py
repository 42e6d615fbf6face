import http.server
import os
import sys
import threading

import pytest

from composetools.e2e import (
    DOCKER_EXECUTABLE_NAME,
    CommandResult,
    E2eCLI,
    copy_file,
    dir_contents,
    find_executable,
    http_get_with_retry,
    lines,
    new_e2e_cli,
    run_command,
    stdout_contains,
)


@pytest.fixture
def cli(tmp_path):
    return E2eCLI("bin", str(tmp_path / "config"))


def test_new_cmd_sets_environment(cli):
    cmd = cli.new_cmd("echo", "a", "b")
    assert cmd.command == ["echo", "a", "b"]
    assert cmd.env["DOCKER_CONFIG"] == cli.config_dir
    assert cmd.env["KUBECONFIG"] == "invalid"


def test_new_docker_cmd(cli):
    cmd = cli.new_docker_cmd("compose", "ls")
    assert cmd.command == [DOCKER_EXECUTABLE_NAME, "compose", "ls"]


def test_metrics_socket(cli):
    assert cli.metrics_socket() == os.path.join(cli.config_dir, "docker-cli.sock")


def test_run_cmd_captures_output(cli):
    result = cli.run_cmd(sys.executable, "-c", "import os; print(os.environ['DOCKER_CONFIG'])")
    assert result.exit_code == 0
    assert result.stdout.strip() == cli.config_dir


def test_run_cmd_raises_on_failure(cli):
    args = [sys.executable, "-c", "raise SystemExit(3)"]
    with pytest.raises(AssertionError):
        cli.run_cmd(*args)
    result = run_command(args)
    assert result.exit_code == 3


def test_run_cmd_requires_a_command(cli):
    with pytest.raises(AssertionError):
        cli.run_cmd()
    result = cli.run_cmd(sys.executable, "-c", "print('x')")
    assert result.stdout.strip() == "x"


def test_run_command_reports_exit_code():
    result = run_command([sys.executable, "-c", "import sys; sys.stderr.write('err'); sys.exit(2)"])
    assert result.exit_code == 2
    assert result.combined() == "err"


def test_combined_joins_streams():
    result = CommandResult(["x"], 0, "out", "err")
    assert result.combined() == "outerr"


def test_wait_for_cmd_result(cli):
    cmd = cli.new_cmd(sys.executable, "-c", "print('ready')")
    result = cli.wait_for_cmd_result(cmd, stdout_contains("ready"), 5, 0.1)
    assert "ready" in result.stdout


def test_wait_for_cmd_result_rejects_bad_timing(cli):
    cmd = cli.new_cmd(sys.executable, "-c", "pass")
    with pytest.raises(ValueError):
        cli.wait_for_cmd_result(cmd, stdout_contains("x"), 1, 1)


def test_wait_for_condition_succeeds_after_retries(cli):
    calls = []

    def predicate():
        calls.append(1)
        return len(calls) >= 3, "not yet"

    outcome = cli.wait_for_condition(predicate, 5, 0.01)
    assert outcome is None
    assert len(calls) == 3


def test_wait_for_condition_times_out(cli):
    with pytest.raises(TimeoutError):
        cli.wait_for_condition(lambda: (False, "never"), 0.1, 0.02)


def test_cleanup_removes_config_dir(tmp_path):
    config = tmp_path / "config"
    config.mkdir()
    with E2eCLI("bin", str(config)):
        pass
    assert not config.exists()


def test_stdout_contains():
    predicate = stdout_contains("hello")
    assert predicate(CommandResult([], 0, "say hello", "")) is True
    assert predicate(CommandResult([], 0, "", "hello")) is False


def test_lines():
    assert lines("  one\ntwo\nthree\n\n") == ["one", "two", "three"]
    assert lines("") == [""]


def test_find_executable(tmp_path):
    (tmp_path / "second").mkdir()
    target = tmp_path / "second" / "tool"
    target.write_text("x")
    found = find_executable("tool", [str(tmp_path / "first"), str(tmp_path / "second")])
    assert found == str(target)


def test_find_executable_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_executable("tool", [str(tmp_path)])


def test_copy_file(tmp_path):
    source = tmp_path / "src"
    source.write_bytes(b"payload")
    destination = tmp_path / "dst"
    destination.write_bytes(b"old content that is longer")
    copy_file(source, destination)
    assert destination.read_bytes() == b"payload"


def test_dir_contents_order(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "c").write_text("")
    (tmp_path / "a").write_text("")
    assert dir_contents(tmp_path) == [
        str(tmp_path),
        str(tmp_path / "a"),
        str(tmp_path / "b"),
        str(tmp_path / "b" / "c"),
    ]


def test_new_e2e_cli_copies_plugin(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    (bin_dir / "docker-compose").write_bytes(b"plugin")
    (bin_dir / "docker-compose.exe").write_bytes(b"plugin")
    work = tmp_path / "a" / "b"
    work.mkdir(parents=True)
    monkeypatch.chdir(work)
    cli = new_e2e_cli(str(bin_dir))
    try:
        plugins = os.path.join(cli.config_dir, "cli-plugins")
        names = os.listdir(plugins)
        assert len(names) == 2
        for name in names:
            with open(os.path.join(plugins, name), "rb") as handle:
                assert handle.read() == b"plugin"
    finally:
        cli.cleanup()
    assert not os.path.exists(cli.config_dir)


class _Handler(http.server.BaseHTTPRequestHandler):
    def do_GET(self):
        status = 200 if self.path == "/ok" else 404
        body = b"Hello from server"
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def server():
    httpd = http.server.HTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


def test_http_get_with_retry(server):
    body = http_get_with_retry(server + "/ok", 200, 1.0, 5.0)
    assert body == "Hello from server"


def test_http_get_with_retry_accepts_expected_error_status(server):
    body = http_get_with_retry(server + "/missing", 404, 1.0, 5.0)
    assert "Hello" in body


def test_http_get_with_retry_times_out(server):
    with pytest.raises(TimeoutError):
        http_get_with_retry(server + "/missing", 200, 0.05, 0.2)