import io
from concurrent.futures import ThreadPoolExecutor

import pytest

import bundle_redact
from bundle_redact.exceptions import CompileError, ReadError
from bundle_redact.ledger import get_redaction_list
from bundle_redact.models import MASK_TEXT
from bundle_redact.redactor.engines import RedactionEngine, redactor_name
from bundle_redact.rules.schema import MultiLinePair, RuleSpec


class _BrokenStream(io.BytesIO):
    def read(self, size: int | None = -1) -> bytes:
        raise OSError("disk on fire")


def test_builtin_env_pair_redacts_password(ledger):
    engine = RedactionEngine(ledger)
    output = engine.redact(b'"name": "password"\n"value": "hunter2"\n', "pods/app.json")

    assert output == f'"name": "password"\n"value": "{MASK_TEXT}"\n'.encode()
    snapshot = ledger.snapshot()
    assert snapshot.total() == 1
    (record,) = snapshot.by_redactor["builtin.env-pair.password"]
    assert (record.line, record.characters_removed, record.file) == (2, 7, "pods/app.json")


def test_builtin_connection_string(ledger):
    output = RedactionEngine(ledger).redact(b"Server=db.internal;Database=app;\n", "app.config")
    assert output == f"Server={MASK_TEXT};Database={MASK_TEXT};\n".encode()


def test_literal_rule_counts_every_occurrence(ledger):
    rules = [RuleSpec(values=["secret-token"])]
    output = RedactionEngine(ledger).redact(b"a secret-token b secret-token\n", "app.log", rules)

    assert output == f"a {MASK_TEXT} b {MASK_TEXT}\n".encode()
    (record,) = ledger.snapshot().by_redactor["unnamed-0.0-literal"]
    assert record.characters_removed == 24


def test_rule_scoped_by_glob(ledger):
    engine = RedactionEngine(ledger)
    rules = [RuleSpec(file="logs/*.log", values=["abc"])]

    assert engine.redact(b"abc\n", "config/app.yaml", rules) == b"abc\n"
    assert engine.redact(b"abc\n", "logs/app.log", rules) == f"{MASK_TEXT}\n".encode()


def test_rule_scoped_by_any_of_several_globs(ledger):
    engine = RedactionEngine(ledger)
    rules = [RuleSpec(files=["a/*", "b/*"], values=["abc"])]

    assert engine.redact(b"abc\n", "b/x.txt", rules) == f"{MASK_TEXT}\n".encode()
    assert engine.redact(b"abc\n", "c/x.txt", rules) == b"abc\n"


def test_redactor_names(ledger):
    engine = RedactionEngine(ledger)
    rules = [
        RuleSpec(name="tokens", regex=[r"(t=)(?P<mask>\w+)"], values=["v"]),
        None,
        RuleSpec(
            regex=[r"x"],
            values=["y"],
            multi_line=[MultiLinePair(selector="a", redactor="b")],
            yaml=["k"],
        ),
    ]

    names = [redactor.name for redactor in engine.custom_redactors("f.txt", rules)]
    assert names == [
        "tokens-0",
        "tokens-1",
        "unnamed-2.0-regex",
        "unnamed-2.1-literal",
        "unnamed-2.2-multiLine",
        "unnamed-2.3-yaml",
    ]
    assert redactor_name(4, 1, None, "literal") == "unnamed-4.1-literal"


def test_builtins_run_before_custom_rules(ledger):
    engine = RedactionEngine(ledger)
    names = [redactor.name for redactor in engine.build_redactors("f.txt", [RuleSpec(values=["v"])])]

    assert names[0] == "builtin.ipv4"
    assert names[-1] == "unnamed-0.0-literal"
    assert names[:-1] == engine.builtin_names


def test_builtins_can_be_disabled(ledger):
    engine = RedactionEngine(ledger, include_builtins=False)
    assert engine.build_redactors("f.txt") == []
    assert engine.redact(b"10.0.0.1\n", "f.txt") == b"10.0.0.1\n"


def test_invalid_custom_rule_fails_in_strict_mode(ledger):
    engine = RedactionEngine(ledger)
    with pytest.raises(CompileError):
        engine.redact(b"abc\n", "f.txt", [RuleSpec(name="broken", regex=["(unclosed"])])


def test_invalid_custom_rule_skipped_when_lenient(ledger):
    engine = RedactionEngine(ledger, strict=False)
    rules = [RuleSpec(name="broken", regex=["(unclosed"], values=["abc"])]

    assert engine.redact(b"abc\n", "f.txt", rules) == f"{MASK_TEXT}\n".encode()
    assert list(ledger.snapshot().by_redactor) == ["broken-1"]


def test_invalid_glob_fails_in_strict_mode(ledger):
    with pytest.raises(CompileError):
        RedactionEngine(ledger).redact(b"abc\n", "f.txt", [RuleSpec(file="[oops", values=["abc"])])


def test_read_failure_raises(ledger):
    with pytest.raises(ReadError):
        RedactionEngine(ledger).redact_file(_BrokenStream(), "f.txt")


def test_yaml_parse_error_reported_while_other_redactors_apply(ledger):
    rules = [RuleSpec(yaml=["a.b"], values=["secret"])]
    result = RedactionEngine(ledger).redact_with_report(b"key: [oops secret\n", "broken.yaml", rules)

    assert result.content == f"key: [oops {MASK_TEXT}\n".encode()
    assert len(result.errors) == 1
    assert result.errors[0].file_path == "broken.yaml"


def test_redacting_twice_changes_nothing(ledger):
    engine = RedactionEngine(ledger)
    content = (
        b"Server=db1;Pwd=abc;\r\n"
        b"fetch https://bob:pw@host.example:443/x\n"
        b"user:pass@tcp(10.1.2.3:3306)/appdb\n"
        b'"name": "DB_PASSWORD"\n'
        b'"value": "hunter2"'
    )
    rules = [RuleSpec(values=["appdb-token"], regex=[r"(api_key=)(?P<mask>\w+)"])]

    once = engine.redact(content, "bundle/app.log", rules)
    assert once != content
    assert once.count(b"\n") == content.count(b"\n")
    assert once.startswith(f"Server={MASK_TEXT};Pwd={MASK_TEXT};\r\n".encode())
    assert engine.redact(once, "bundle/app.log", rules) == once


def test_content_without_secrets_is_untouched(ledger):
    content = b"plain text\r\nno secrets\n\n\xff\xfe\n"
    assert RedactionEngine(ledger).redact(content, "a.txt") == content
    assert ledger.snapshot().total() == 0


def test_concurrent_files_share_one_ledger(ledger):
    engine = RedactionEngine(ledger)
    rules = [RuleSpec(name="tok", values=["tok"])]

    def _redact(index: int) -> bytes:
        return engine.redact(b"tok one\ntok two\ntok three\n", f"file-{index}.log", rules)

    with ThreadPoolExecutor(max_workers=4) as pool:
        outputs = list(pool.map(_redact, range(8)))

    assert set(outputs) == {f"{MASK_TEXT} one\n{MASK_TEXT} two\n{MASK_TEXT} three\n".encode()}
    snapshot = ledger.snapshot()
    assert len(snapshot.by_redactor["tok-0"]) == 24
    assert all(len(snapshot.by_file[f"file-{index}.log"]) == 3 for index in range(8))


def test_module_level_redact_uses_default_ledger():
    output = bundle_redact.redact(b"Pwd=hunter2;\n", "app.config")
    assert output == f"Pwd={MASK_TEXT};\n".encode()
    assert get_redaction_list().by_redactor["builtin.connection-string.pwd"][0].characters_removed == 7


def test_custom_regex_keeps_text_outside_capture_groups(ledger):
    rules = [RuleSpec(regex=[r"password=(?P<mask>\S+)", r"(k)=(?P<mask>v);"])]
    output = RedactionEngine(ledger).redact(b"password=hunter2 rest\nk=v;x\n", "app.log", rules)

    assert output == f"password={MASK_TEXT} rest\nk={MASK_TEXT};x\n".encode()
    assert [record.characters_removed for record in ledger.snapshot().by_file["app.log"]] == [7, 1]
