import pytest


@pytest.fixture
def aqs_env(monkeypatch):
    monkeypatch.setenv("AQS_EMAIL", "env@example.com")
    monkeypatch.setenv("AQS_API_KEY", "envkey")


@pytest.fixture
def no_aqs_env(monkeypatch):
    monkeypatch.delenv("AQS_EMAIL", raising=False)
    monkeypatch.delenv("AQS_API_KEY", raising=False)
