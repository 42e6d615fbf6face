from composetools.splitwriter import SplitWriter, get_writer


def _collector():
    lines = []
    return lines, get_writer(lines.append)


def test_split_writer():
    lines, w = _collector()
    for chunk in [b"h", b"e", b"l", b"l", b"o", b"\n", b"world!\n"]:
        w.write(chunk)
    assert lines == ["hello", "world!"]


def test_write_returns_length():
    _, w = _collector()
    assert w.write(b"abc\ndef") == 7


def test_multiple_lines_in_one_write():
    lines, w = _collector()
    w.write(b"one\ntwo\nthree")
    assert lines == ["one", "two"]


def test_close_flushes_partial_line():
    lines, w = _collector()
    w.write(b"one\ntail")
    w.close()
    assert lines == ["one", "tail"]


def test_close_with_empty_buffer_emits_nothing():
    lines, w = _collector()
    w.write(b"done\n")
    w.close()
    assert lines == ["done"]


def test_context_manager_flushes():
    lines = []
    with SplitWriter(lines.append) as w:
        w.write(b"a\nb")
    assert lines == ["a", "b"]


def test_empty_lines_are_kept():
    lines, w = _collector()
    w.write(b"\n\nx\n")
    assert lines == ["", "", "x"]