from pathlib import Path

import pytest

from bundle_redact import config as config_module
from bundle_redact.config import DEFAULT_CONFIG, dump_default_config, load_config


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "runtime_config_dir", lambda: tmp_path / "user-config")
    return tmp_path


def test_defaults_when_no_config_present(isolated):
    assert load_config() == DEFAULT_CONFIG


def test_explicit_config_file(isolated: Path):
    path = isolated / "custom.yaml"
    path.write_text(
        "logging:\n  level: debug\n  format: console\n"
        "redaction:\n  workers: 2\n  strict_rules: false\n  rules_files: [rules.yaml]\n"
    )

    loaded = load_config(path)
    assert loaded.logging.normalized_level() == "DEBUG"
    assert loaded.logging.format == "console"
    assert loaded.redaction.workers == 2
    assert loaded.redaction.strict_rules is False
    assert loaded.redaction.rules_files == [Path("rules.yaml")]
    assert loaded.redaction.include_builtins is True


def test_project_config_discovered(isolated: Path):
    project = isolated / ".bundle-redact" / "config.yaml"
    project.parent.mkdir()
    project.write_text("redaction:\n  chunk_size: 128\n")
    assert load_config().redaction.chunk_size == 128


@pytest.mark.parametrize(
    "body",
    [
        "logging:\n  level: loud\n",
        "redaction:\n  workers: 0\n",
        "redaction:\n  chunk_size: 0\n",
    ],
)
def test_invalid_config_rejected(isolated: Path, body: str):
    path = isolated / "bad.yaml"
    path.write_text(body)
    with pytest.raises(ValueError):
        load_config(path)


def test_dumped_defaults_load_back(isolated: Path):
    target = isolated / "out" / "config.yaml"
    dump_default_config(target)
    assert load_config(target) == DEFAULT_CONFIG
