import json
import logging

import pytest

from pytiers.config import SolverConfigError, SolverSettings, get_settings
from pytiers.config_loader import SolverProfile


def test_default_settings(monkeypatch):
    for name in ("PYTIERS_MAX_ITERS", "PYTIERS_SETTLE_THRESHOLD", "PYTIERS_ACTIVATION_CAP", "PYTIERS_PARALLEL_JOBS"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()
    assert settings.max_iters == 5000
    assert settings.settle_threshold == pytest.approx(1e-6)
    assert settings.activation_cap == pytest.approx(30.0)
    assert settings.parallel_jobs == 1


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PYTIERS_MAX_ITERS", "250")
    monkeypatch.setenv("PYTIERS_ACTIVATION_CAP", "12.5")
    monkeypatch.setenv("PYTIERS_PARALLEL_JOBS", "0")

    settings = get_settings()
    assert settings.max_iters == 250
    assert settings.activation_cap == pytest.approx(12.5)
    assert settings.parallel_jobs == 1


def test_invalid_environment_value_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("PYTIERS_SETTLE_THRESHOLD", "tiny")

    with caplog.at_level(logging.WARNING):
        settings = get_settings()

    assert settings.settle_threshold == pytest.approx(1e-6)
    assert "PYTIERS_SETTLE_THRESHOLD" in caplog.text


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_iters": 0},
        {"settle_threshold": 0.0},
        {"activation_cap": 0.0},
        {"activation_cap": -3.0},
        {"activation_cap": float("inf")},
        {"parallel_jobs": 0},
    ],
)
def test_validate_rejects_degenerate_settings(overrides):
    with pytest.raises(SolverConfigError):
        SolverSettings(**overrides).validate()


def test_with_overrides_ignores_none():
    settings = SolverSettings(max_iters=10).with_overrides(max_iters=None, activation_cap=5.0)

    assert settings.max_iters == 10
    assert settings.activation_cap == 5.0


def test_solver_profile_round_trip(tmp_path):
    path = tmp_path / "profile.json"
    SolverProfile(max_iters=100, activation_cap=12.0, sort_by=1).save(path)

    profile = SolverProfile.load(path)
    assert profile.max_iters == 100
    assert profile.settle_threshold is None
    assert profile.sort_by == 1

    applied = profile.apply(SolverSettings())
    assert applied.max_iters == 100
    assert applied.activation_cap == 12.0
    assert applied.settle_threshold == pytest.approx(1e-6)


def test_solver_profile_coerces_numeric_strings(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps({"max_iters": "250", "activation_cap": "30", "sort_by": 2.0}), encoding="utf-8")

    profile = SolverProfile.load(path)

    assert profile.max_iters == 250
    assert profile.activation_cap == 30.0
    assert profile.sort_by == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"activation_cap": "thirty"},
        {"max_iters": 2.5},
        {"settle_threshold": True},
        {"max_iters": [10]},
    ],
)
def test_solver_profile_rejects_bad_values(tmp_path, payload):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(SolverConfigError):
        SolverProfile.load(path)


def test_solver_profile_rejects_invalid_json(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SolverConfigError):
        SolverProfile.load(path)
