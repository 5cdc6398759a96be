import io

from bundle_redact.models import MASK_TEXT
from bundle_redact.redactor.lines import LineReader
from bundle_redact.redactor.single_line import SingleLineRedactor


def _run(redactor, data: bytes) -> bytes:
    return b"".join(redactor.redact(LineReader(io.BytesIO(data))))


def test_matching_lines_redacted_and_recorded(ledger):
    redactor = SingleLineRedactor.from_source(r"(key=)(?P<mask>\w+)", "keys", "app.log", ledger)
    output = _run(redactor, b"key=a key=bb\nnothing\nkey=c\n")

    assert output == f"key={MASK_TEXT} key={MASK_TEXT}\nnothing\nkey={MASK_TEXT}\n".encode()
    records = ledger.snapshot().by_redactor["keys"]
    assert [(record.line, record.characters_removed) for record in records] == [(1, 3), (3, 1)]
    assert {record.file for record in records} == {"app.log"}


def test_line_terminators_survive(ledger):
    redactor = SingleLineRedactor.from_source(r"(pw=)(?P<mask>\w+)", "pw", "app.log", ledger)
    output = _run(redactor, b"pw=one\r\nplain\r\npw=two")
    assert output == f"pw={MASK_TEXT}\r\nplain\r\npw={MASK_TEXT}".encode()


def test_non_matching_content_passes_through_byte_for_byte(ledger):
    redactor = SingleLineRedactor.from_source(r"(pw=)(?P<mask>\w+)", "pw", "app.log", ledger)
    data = b"\xff\xfe binary \x00 data\nno secrets here\r\n"
    assert _run(redactor, data) == data
    assert ledger.snapshot().total() == 0


def test_undecodable_bytes_around_a_match_are_kept(ledger):
    redactor = SingleLineRedactor.from_source(r"(key=)(?P<mask>\w+)", "keys", "bin.dat", ledger)
    assert _run(redactor, b"\xff\xfe key=x\n") == b"\xff\xfe key=" + MASK_TEXT.encode() + b"\n"


def test_redactor_is_lazy(ledger):
    redactor = SingleLineRedactor.from_source(r"(key=)(?P<mask>\w+)", "keys", "app.log", ledger)
    lines = redactor.redact(iter([b"key=a\n", b"key=b\n"]))
    assert next(lines) == f"key={MASK_TEXT}\n".encode()
    assert len(ledger.snapshot().by_redactor["keys"]) == 1
