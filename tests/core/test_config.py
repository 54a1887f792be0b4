# tests/core/test_config.py
"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from typestep.contracts import OutputFormat, Queue
from typestep.core.config import (
    OutputSettings,
    QueueSettings,
    StateMachineSettings,
    TypeStepSettings,
    load_settings,
)


class TestSettingsSchema:
    def test_defaults(self) -> None:
        settings = TypeStepSettings()

        assert settings.state_machine.name == "StateMachine"
        assert settings.state_machine.max_seq_concurrency is None
        assert settings.dead_letter_queue is None
        assert settings.output.format == OutputFormat.JSON
        assert settings.output.indent == 2

    def test_settings_are_frozen(self) -> None:
        settings = StateMachineSettings()

        with pytest.raises(ValidationError):
            settings.name = "Other"  # type: ignore[misc]

    @pytest.mark.parametrize("name", ["has space", "dots.are.bad", "x" * 81])
    def test_invalid_state_machine_name(self, name: str) -> None:
        with pytest.raises(ValidationError, match="invalid state machine name"):
            StateMachineSettings(name=name)

    def test_max_seq_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            StateMachineSettings(max_seq_concurrency=0)

    def test_queue_settings_to_resource(self) -> None:
        queue = QueueSettings(name="reply", url="https://sqs/reply", arn="arn:aws:sqs:eu-west-1:0:reply").to_resource()

        assert queue == Queue(name="reply", url="https://sqs/reply", arn="arn:aws:sqs:eu-west-1:0:reply")

    def test_queue_requires_url(self) -> None:
        with pytest.raises(ValidationError):
            QueueSettings(name="reply", url="")

    def test_output_indent_bounds(self) -> None:
        with pytest.raises(ValidationError):
            OutputSettings(indent=9)


class TestLoadSettings:
    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
state_machine:
  name: Recommendations
  max_seq_concurrency: 10
dead_letter_queue:
  name: reply
  url: https://sqs.eu-west-1.amazonaws.com/000000000000/reply
output:
  format: yaml
"""
        )

        settings = load_settings(config_file)

        assert settings.state_machine.name == "Recommendations"
        assert settings.state_machine.max_seq_concurrency == 10
        assert settings.dead_letter_queue is not None
        assert settings.dead_letter_queue.name == "reply"
        assert settings.output.format == OutputFormat.YAML

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("state_machine:\n  name: FromFile\n")
        monkeypatch.setenv("TYPESTEP_STATE_MACHINE__NAME", "FromEnv")

        settings = load_settings(config_file)

        assert settings.state_machine.name == "FromEnv"

    def test_env_var_expansion_with_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("dead_letter_queue:\n  name: reply\n  url: ${REPLY_URL:-https://default/reply}\n")
        monkeypatch.delenv("REPLY_URL", raising=False)

        settings = load_settings(config_file)

        assert settings.dead_letter_queue is not None
        assert settings.dead_letter_queue.url == "https://default/reply"

    def test_env_var_expansion_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("dead_letter_queue:\n  name: reply\n  url: ${REPLY_URL}\n")
        monkeypatch.setenv("REPLY_URL", "https://env/reply")

        settings = load_settings(config_file)

        assert settings.dead_letter_queue is not None
        assert settings.dead_letter_queue.url == "https://env/reply"

    def test_missing_env_var_without_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("dead_letter_queue:\n  name: reply\n  url: ${TYPESTEP_TEST_UNSET_URL}\n")
        monkeypatch.delenv("TYPESTEP_TEST_UNSET_URL", raising=False)

        with pytest.raises(ValueError, match="Required environment variable 'TYPESTEP_TEST_UNSET_URL' is not set"):
            load_settings(config_file)

    def test_invalid_values_fail_validation(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("state_machine:\n  max_seq_concurrency: -1\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)
