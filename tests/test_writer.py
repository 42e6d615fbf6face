import io

import pytest

from composetools.event import Event
from composetools.noop import NoopWriter
from composetools.plain import PlainWriter
from composetools.tty import TtyWriter
from composetools.writer import (
    context_writer,
    new_writer,
    run,
    run_with_status,
    with_context_writer,
)


class _FakeTerminal(io.StringIO):
    def isatty(self):
        return True


def test_noop_writer():
    assert context_writer() == NoopWriter()


def test_with_context_writer_sets_and_restores():
    writer = PlainWriter(io.StringIO())
    with with_context_writer(writer):
        assert context_writer() is writer
    assert context_writer() == NoopWriter()


def test_new_writer_plain_for_non_terminal():
    out = io.StringIO()
    writer = new_writer(out)
    assert isinstance(writer, PlainWriter)
    writer.event(Event(id="svc", text="Pulling", status_text="Working"))
    assert out.getvalue() == "svc Pulling Working\n"


def test_new_writer_tty_for_terminal():
    out = _FakeTerminal()
    writer = new_writer(out)
    assert isinstance(writer, TtyWriter)
    assert writer.out is out


def test_run_with_status_returns_result_and_prints(capsys):
    def work():
        context_writer().event(Event(id="svc", text="Pulled", status_text="Done"))
        return "finished"

    assert run_with_status(work) == "finished"
    assert "svc Pulled Done" in capsys.readouterr().err
    assert context_writer() == NoopWriter()


def test_run_propagates_errors():
    def fail():
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        run(fail)
    assert context_writer() == NoopWriter()


def test_run_returns_none(capsys):
    seen = []
    assert run(lambda: seen.append(context_writer())) is None
    assert len(seen) == 1
    assert isinstance(seen[0], PlainWriter)