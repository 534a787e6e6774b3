"""
Simulator configuration.

Defaults below can be overridden from the environment (or a .env file) and
then from the command line.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

NUM_HVAC_SYSTEMS = 100
REPORTING_INTERVAL_MS = 60000
SIMULATION_MAX_CYCLES = 60  # None = run until interrupted
API_ENDPOINT = None
API_TIMEOUT_SECONDS = 10.0
KAFKA_BROKERS = 'localhost:9092'
KAFKA_TOPIC = 'hvac-telemetry'

SINK_CHOICES = ('none', 'http', 'kafka')
UNBOUNDED = ('none', 'null', 'unbounded', 'forever')


class ConfigError(ValueError):
    """Malformed configuration value."""


@dataclass
class SimulatorConfig:
    fleet_size: int = NUM_HVAC_SYSTEMS
    interval_ms: int = REPORTING_INTERVAL_MS
    max_cycles: Optional[int] = SIMULATION_MAX_CYCLES
    sink: str = 'none'
    api_endpoint: Optional[str] = API_ENDPOINT
    api_timeout: float = API_TIMEOUT_SECONDS
    kafka_brokers: str = KAFKA_BROKERS
    kafka_topic: str = KAFKA_TOPIC
    seed: Optional[int] = None

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    def validate(self):
        if self.fleet_size < 0:
            raise ConfigError(f"Fleet size must be >= 0, got {self.fleet_size}")
        if self.interval_ms < 0:
            raise ConfigError(f"Reporting interval must be >= 0 ms, got {self.interval_ms}")
        if self.max_cycles is not None and self.max_cycles < 1:
            raise ConfigError(f"Max cycles must be >= 1 or unset, got {self.max_cycles}")
        if self.api_timeout <= 0:
            raise ConfigError(f"API timeout must be > 0 seconds, got {self.api_timeout}")
        if self.sink not in SINK_CHOICES:
            raise ConfigError(f"Unknown sink: {self.sink}. Valid: {list(SINK_CHOICES)}")
        if self.sink == 'http' and not self.api_endpoint:
            raise ConfigError("HTTP sink requires an API endpoint")
        return self


def parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def parse_max_cycles(value: str) -> Optional[int]:
    """'none' or 'forever' mean unbounded"""
    if value.lower() in UNBOUNDED:
        return None
    return parse_int('HVAC_MAX_CYCLES', value)


def _setting(env: Mapping[str, str], name: str) -> Optional[str]:
    """Stripped value of an env var; unset and blank both give None"""
    value = env.get(name, '').strip()
    return value or None


def load_config(env: Mapping[str, str] = None) -> SimulatorConfig:
    """Build a config from environment variables, falling back to defaults."""
    env = os.environ if env is None else env

    config = SimulatorConfig()

    value = _setting(env, 'HVAC_FLEET_SIZE')
    if value is not None:
        config.fleet_size = parse_int('HVAC_FLEET_SIZE', value)
    value = _setting(env, 'HVAC_REPORTING_INTERVAL_MS')
    if value is not None:
        config.interval_ms = parse_int('HVAC_REPORTING_INTERVAL_MS', value)
    value = _setting(env, 'HVAC_MAX_CYCLES')
    if value is not None:
        config.max_cycles = parse_max_cycles(value)
    value = _setting(env, 'HVAC_SEED')
    if value is not None:
        config.seed = parse_int('HVAC_SEED', value)
    value = _setting(env, 'HVAC_API_TIMEOUT')
    if value is not None:
        config.api_timeout = parse_float('HVAC_API_TIMEOUT', value)

    config.api_endpoint = _setting(env, 'HVAC_API_ENDPOINT') or API_ENDPOINT
    config.kafka_brokers = _setting(env, 'KAFKA_BROKERS') or KAFKA_BROKERS
    config.kafka_topic = _setting(env, 'KAFKA_TOPIC') or KAFKA_TOPIC

    # Remote delivery is on only when an endpoint is configured
    config.sink = _setting(env, 'HVAC_SINK') or ('http' if config.api_endpoint else 'none')

    return config
