# tests/test_manage.py
"""Tests for the management CLI."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm import sessionmaker

from fittrack_auth.models import User
from fittrack_auth.scripts import manage
from fittrack_auth.services.throttle_store import ThrottleStoreError

FINGERPRINT = ["alice", "203.0.113.5", "curl/8.0"]


@pytest.fixture()
def cli_env(monkeypatch, engine, throttle):
    monkeypatch.setattr(manage, "SessionLocal", sessionmaker(bind=engine, expire_on_commit=False))
    monkeypatch.setattr(manage, "create_tables", lambda: None)
    monkeypatch.setattr(manage, "get_login_throttle", lambda: throttle)
    return throttle


def test_create_user(cli_env, db_session, capsys) -> None:
    rc = manage.main_cli(["create-user", "carol", "--email", "carol@example.com", "--password", "pw"])

    assert rc == 0
    assert "created user" in capsys.readouterr().out
    user = db_session.query(User).filter(User.username == "carol").one()
    assert user.email == "carol@example.com"
    assert user.is_active is True
    assert user.password_hash != "pw"


def test_create_inactive_user(cli_env, db_session) -> None:
    assert manage.main_cli(["create-user", "dave", "--password", "pw", "--inactive"]) == 0
    user = db_session.query(User).filter(User.username == "dave").one()
    assert user.is_active is False


def test_create_duplicate_user_fails(cli_env, test_user, capsys) -> None:
    rc = manage.main_cli(["create-user", "alice", "--password", "pw"])
    assert rc == 1
    assert "already exists" in capsys.readouterr().err


def test_create_user_requires_password(cli_env, monkeypatch, capsys) -> None:
    monkeypatch.setattr(manage.getpass, "getpass", lambda prompt: "")
    assert manage.main_cli(["create-user", "erin"]) == 1
    assert "password" in capsys.readouterr().err


def test_create_user_prompt_mismatch(cli_env, monkeypatch) -> None:
    answers = iter(["one", "two"])
    monkeypatch.setattr(manage.getpass, "getpass", lambda prompt: next(answers))
    assert manage.main_cli(["create-user", "erin"]) == 1


def test_throttle_status(cli_env, capsys) -> None:
    cli_env.record_failure(*FINGERPRINT)
    cli_env.record_failure(*FINGERPRINT)

    assert manage.main_cli(["throttle-status", *FINGERPRINT]) == 0

    out = capsys.readouterr().out
    assert "- blocked: yes" in out
    assert "- remaining_seconds: 2" in out
    assert "- failure_count: 2" in out


def test_throttle_clear(cli_env, capsys) -> None:
    cli_env.record_failure(*FINGERPRINT)

    assert manage.main_cli(["throttle-clear", *FINGERPRINT]) == 0

    assert "cleared" in capsys.readouterr().out
    assert cli_env.check_blocked(*FINGERPRINT).blocked is False
    assert cli_env.failure_count(*FINGERPRINT) == 0


def test_throttle_status_store_unavailable(monkeypatch, capsys) -> None:
    broken = MagicMock()
    broken.check_blocked.side_effect = ThrottleStoreError("down")
    monkeypatch.setattr(manage, "get_login_throttle", lambda: broken)

    assert manage.main_cli(["throttle-status", "alice", "203.0.113.5"]) == 1
    assert "unavailable" in capsys.readouterr().err
