"""Tests for ftp-up CLI helpers."""
import argparse
import logging
import os

import pytest

from ftp_uploader.cli import (
    CLIError,
    _load_env_file,
    _normalize_dest,
    _resolve_credentials,
    _setup_logging,
    run_cli,
)


def _args(**overrides):
    values = {"host": None, "port": None, "user": None, "password": None}
    values.update(overrides)
    return argparse.Namespace(**values)


def test_normalize_dest():
    assert _normalize_dest(None) == "/"
    assert _normalize_dest("") == "/"
    assert _normalize_dest(" / ") == "/"
    assert _normalize_dest("backups/2026/") == "/backups/2026"
    assert _normalize_dest("\\backups\\x") == "/backups/x"


def test_load_env_file(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# ftp server",
                "FTP_HOST=ftp.example.com",
                "FTP_PASSWORD='s3cret'",
                "export FTP_USER=bob",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.delenv("FTP_HOST", raising=False)
    monkeypatch.delenv("FTP_PASSWORD", raising=False)
    monkeypatch.delenv("FTP_USER", raising=False)

    _load_env_file(env_path)

    assert os.environ["FTP_HOST"] == "ftp.example.com"
    assert os.environ["FTP_PASSWORD"] == "s3cret"
    assert os.environ["FTP_USER"] == "bob"


def test_load_env_file_keeps_existing(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text("FTP_HOST=from-file", encoding="utf-8")
    monkeypatch.setenv("FTP_HOST", "from-env")

    _load_env_file(env_path)
    assert os.environ["FTP_HOST"] == "from-env"

    _load_env_file(env_path, override=True)
    assert os.environ["FTP_HOST"] == "from-file"


def test_load_env_file_missing(tmp_path):
    with pytest.raises(CLIError, match="env file not found"):
        _load_env_file(tmp_path / "missing.env")


def test_resolve_credentials_prefers_arguments(monkeypatch):
    monkeypatch.setenv("FTP_HOST", "env-host")
    monkeypatch.setenv("FTP_PORT", "2121")
    monkeypatch.setenv("FTP_USER", "env-user")
    monkeypatch.setenv("FTP_PASSWORD", "env-pass")

    cred = _resolve_credentials(_args(host="arg-host", password="arg-pass"))

    assert cred.host == "arg-host"
    assert cred.port == 2121
    assert cred.user == "env-user"
    assert cred.password == "arg-pass"


def test_resolve_credentials_defaults(monkeypatch):
    for key in ("FTP_PORT", "FTP_USER", "FTP_PASSWORD"):
        monkeypatch.delenv(key, raising=False)

    cred = _resolve_credentials(_args(host="h"))

    assert cred.port == 21
    assert cred.user == "anonymous"
    assert cred.password == ""


def test_resolve_credentials_requires_host(monkeypatch):
    monkeypatch.delenv("FTP_HOST", raising=False)
    with pytest.raises(CLIError, match="no FTP host"):
        _resolve_credentials(_args())


def test_resolve_credentials_bad_port(monkeypatch):
    monkeypatch.setenv("FTP_PORT", "twenty-one")
    with pytest.raises(CLIError, match="invalid FTP port"):
        _resolve_credentials(_args(host="h"))


def test_setup_logging_defaults_to_silent(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    mode = _setup_logging(debug=False, silent=False, log_level=None)
    assert mode == "silent"
    assert logging.getLogger().isEnabledFor(logging.ERROR) is False
    logging.disable(logging.NOTSET)


def test_setup_logging_debug_mode(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    mode = _setup_logging(debug=True, silent=False, log_level=None)
    assert mode == "DEBUG"
    assert logging.getLogger().isEnabledFor(logging.DEBUG) is True
    logging.disable(logging.NOTSET)


def test_setup_logging_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    mode = _setup_logging(debug=False, silent=False, log_level=None)
    assert mode == "WARNING"
    logging.disable(logging.NOTSET)


def test_setup_logging_quiets_ftp_commands_unless_debug(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    _setup_logging(debug=False, silent=False, log_level="info")
    assert logging.getLogger("aioftp").getEffectiveLevel() == logging.WARNING
    _setup_logging(debug=True, silent=False, log_level=None)
    assert logging.getLogger("aioftp").getEffectiveLevel() == logging.DEBUG
    logging.getLogger("aioftp").setLevel(logging.NOTSET)
    logging.disable(logging.NOTSET)


def test_run_cli_missing_source(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    code = run_cli([str(tmp_path / "nope")])
    assert code == 1
    assert "source does not exist" in capsys.readouterr().err
    logging.disable(logging.NOTSET)


def test_run_cli_without_host(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FTP_HOST", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    source = tmp_path / "a.txt"
    source.write_text("hi")

    code = run_cli([str(source)])

    assert code == 1
    assert "no FTP host" in capsys.readouterr().err
    logging.disable(logging.NOTSET)
