from __future__ import annotations

from pathlib import Path

import pytest

from phpcheck.config import CheckerConfig, load_config
from phpcheck.errors import ConfigError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file_or_env() -> None:
    assert load_config(env={}) == CheckerConfig()


def test_yaml_file_then_env_precedence(tmp_path: Path) -> None:
    config_path = _write(
        tmp_path / "phpcheck.yaml",
        "php_binary: /opt/php/bin/php\ntimeout_seconds: 4\ninclude:\n  - '*.php'\n  - '*.phtml'\n",
    )

    config = load_config(config_path, env={"PHPCHECK_TIMEOUT_SECONDS": "2.5", "PHPCHECK_EXTERNAL": "off"})

    assert config.php_binary == "/opt/php/bin/php"
    assert config.timeout_seconds == 2.5
    assert config.external_enabled is False
    assert config.include == ("*.php", "*.phtml")


def test_config_path_from_env(tmp_path: Path) -> None:
    config_path = _write(tmp_path / "phpcheck.yaml", "known_binary: /usr/local/bin/php\ntemp_dir: scratch\n")

    config = load_config(env={"PHPCHECK_CONFIG": str(config_path), "PHPCHECK_PHP_BINARY": "php8"})

    assert config.known_binary == "/usr/local/bin/php"
    assert config.temp_dir == Path("scratch")
    assert config.php_binary == "php8"


def test_empty_yaml_is_defaults(tmp_path: Path) -> None:
    assert load_config(_write(tmp_path / "empty.yaml", ""), env={}) == CheckerConfig()


@pytest.mark.parametrize(
    "text",
    [
        "unknown_key: 1\n",
        "- just\n- a list\n",
        "timeout_seconds: 0\n",
        "timeout_seconds: soon\n",
        "external_enabled: maybe\n",
        "include: 3\n",
        "known_binary: ''\n",
        "php_binary: [1, 2\n",
    ],
)
def test_bad_yaml_is_rejected(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path / "bad.yaml", text), env={})


def test_bad_env_is_rejected() -> None:
    with pytest.raises(ConfigError):
        load_config(env={"PHPCHECK_EXTERNAL": "sometimes"})
    with pytest.raises(ConfigError):
        load_config(env={"PHPCHECK_TIMEOUT_SECONDS": "-1"})


def test_missing_file_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml", env={})


def test_config_error_is_value_error() -> None:
    assert issubclass(ConfigError, ValueError)
