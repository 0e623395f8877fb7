from __future__ import annotations

import logging

import pytest

from nexstar.config import NexStarConfig


def test_defaults_match_line_settings() -> None:
    config = NexStarConfig()
    assert config.port is None
    assert config.baud == 9600
    assert config.read_timeout_s == 1.0
    assert config.write_timeout_s == 1.0
    assert config.level == logging.INFO


def test_from_env() -> None:
    config = NexStarConfig.from_env(
        {
            "NEXSTAR_PORT": "/dev/ttyUSB3",
            "NEXSTAR_BAUD": "19200",
            "NEXSTAR_READ_TIMEOUT_S": "0.25",
            "NEXSTAR_WRITE_TIMEOUT_S": "2",
            "NEXSTAR_LOG_LEVEL": "debug",
        }
    )
    assert config == NexStarConfig(
        port="/dev/ttyUSB3",
        baud=19200,
        read_timeout_s=0.25,
        write_timeout_s=2.0,
        log_level="debug",
    )
    assert config.level == logging.DEBUG


def test_from_env_empty_port_means_auto() -> None:
    assert NexStarConfig.from_env({"NEXSTAR_PORT": ""}).port is None


def test_replace_skips_unset_values() -> None:
    config = NexStarConfig(port="COM1").replace(port=None, baud=4800, log_level=None)
    assert config.port == "COM1"
    assert config.baud == 4800
    assert config.log_level == "INFO"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"port": ""},
        {"baud": 0},
        {"read_timeout_s": 0},
        {"write_timeout_s": -1.0},
        {"log_level": "chatty"},
    ],
)
def test_validation(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        NexStarConfig(**kwargs)
