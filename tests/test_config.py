from __future__ import annotations

from pathlib import Path

import pytest

from rollcov.config import AppConfig, RuntimeConfig, load_config
from rollcov.core.covariance import InsufficientSamplesError, create, value


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("ROLLCOV_INSUFFICIENT_SAMPLES", raising=False)
    return tmp_path


def test_defaults() -> None:
    cfg = load_config()
    assert cfg.env.LOG_LEVEL == "INFO"
    assert cfg.runtime.covariance.insufficient_samples == "ieee"
    assert cfg.insufficient_samples_policy == "ieee"


def test_yaml_file_in_cwd(isolated_env: Path) -> None:
    (isolated_env / "rollcov.yaml").write_text("covariance:\n  insufficient_samples: raise\n", encoding="utf-8")
    cfg = load_config()
    assert cfg.insufficient_samples_policy == "raise"
    with pytest.raises(InsufficientSamplesError):
        value(create(1.0, 2.0), policy=cfg.insufficient_samples_policy)


def test_explicit_path_and_empty_file(isolated_env: Path) -> None:
    path = isolated_env / "empty.yaml"
    path.write_text("", encoding="utf-8")
    cfg = AppConfig.load(path)
    assert cfg.insufficient_samples_policy == "ieee"


def test_invalid_yaml_raises_value_error(isolated_env: Path) -> None:
    path = isolated_env / "bad.yaml"
    path.write_text("covariance:\n  insufficient_samples: zero\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid bad.yaml"):
        AppConfig.load(path)


def test_env_override_wins(isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (isolated_env / "rollcov.yaml").write_text("covariance:\n  insufficient_samples: ieee\n", encoding="utf-8")
    monkeypatch.setenv("ROLLCOV_INSUFFICIENT_SAMPLES", "raise")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    cfg = load_config()
    assert cfg.env.LOG_LEVEL == "debug"
    assert cfg.runtime.covariance.insufficient_samples == "ieee"
    assert cfg.insufficient_samples_policy == "raise"


def test_env_accepts_plain_dict() -> None:
    cfg = AppConfig(env={"LOG_LEVEL": "WARNING"}, runtime=RuntimeConfig())
    assert cfg.env.LOG_LEVEL == "WARNING"


def test_yaml_syntax_error_raises_value_error(isolated_env: Path) -> None:
    path = isolated_env / "broken.yaml"
    path.write_text("covariance: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid broken.yaml"):
        AppConfig.load(path)


def test_top_level_list_raises_value_error(isolated_env: Path) -> None:
    path = isolated_env / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="expected a mapping"):
        AppConfig.load(path)


def test_error_names_the_file_that_was_loaded(isolated_env: Path) -> None:
    path = isolated_env / "other.yaml"
    path.write_text("covariance:\n  insufficient_samples: zero\n", encoding="utf-8")
    with pytest.raises(ValueError, match="other.yaml"):
        AppConfig.load(path)
