"""設定読み込みのユニットテスト"""

from pathlib import Path

import pytest
from conftest import make_configuration
from k1s0_targeting import (
    InMemoryTargetingService,
    TargetingError,
    TargetingErrorCodes,
    TargetingSession,
    TargetingSettings,
    ToggleKeys,
    load_settings,
)


def test_defaults() -> None:
    settings = TargetingSettings()
    assert settings.split_total == 10000
    assert settings.classifier.non_material_variation_fields == ["value", "description"]
    assert settings.classifier.non_material_rule_fields == ["name"]
    assert settings.log.format == "json"


def test_load_targeting_section(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "app:\n  name: toggle-editor\n"
        "targeting:\n"
        "  messages:\n    common.user.text: ユーザー\n"
        "  log:\n    level: DEBUG\n",
        encoding="utf-8",
    )
    settings = load_settings(config_file)
    assert settings.messages["common.user.text"] == "ユーザー"
    assert settings.log.level == "DEBUG"


def test_load_with_env_override(tmp_path: Path) -> None:
    base_file = tmp_path / "base.yaml"
    base_file.write_text("log:\n  level: INFO\n  format: json\n")
    env_file = tmp_path / "dev.yaml"
    env_file.write_text("log:\n  format: text\n")
    settings = load_settings(base_file, env_file)
    assert settings.log.level == "INFO"
    assert settings.log.format == "text"


def test_load_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(TargetingError) as exc_info:
        load_settings(tmp_path / "missing.yaml")
    assert exc_info.value.code == TargetingErrorCodes.READ_FILE


def test_load_invalid_yaml(tmp_path: Path) -> None:
    bad_file = tmp_path / "bad.yaml"
    bad_file.write_text("log: {invalid: yaml: content:\n")
    with pytest.raises(TargetingError) as exc_info:
        load_settings(bad_file)
    assert exc_info.value.code == TargetingErrorCodes.PARSE_YAML


def test_load_validation_error(tmp_path: Path) -> None:
    bad_file = tmp_path / "bad_settings.yaml"
    bad_file.write_text("split_total: 0\n")
    with pytest.raises(TargetingError) as exc_info:
        load_settings(bad_file)
    assert exc_info.value.code == TargetingErrorCodes.VALIDATION


def test_settings_drive_session_messages() -> None:
    settings = TargetingSettings(messages={"common.user.text": "利用者"})
    session = TargetingSession(
        make_configuration(),
        service=InMemoryTargetingService(),
        keys=ToggleKeys("p", "e", "t"),
        settings=settings,
    )
    assert session.model.rules[1].conditions[0].subject == "利用者"
