"""Configuration management for the Primo pipes probe.

Settings come from an optional YAML file and are overridden by command
line flags. The password can also be taken from PRIMO_PIPES_PASSWORD.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..collectors.session import DEFAULT_CA_BUNDLE, DEFAULT_COOKIE_JAR, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

CONFIG_ENV = "PRIMO_PIPES_CONFIG"
PASSWORD_ENV = "PRIMO_PIPES_PASSWORD"


class ConfigError(ValueError):
    """Raised when the probe configuration is incomplete or invalid."""


def parse_watch_list(value: Union[str, List[str], None]) -> List[str]:
    """Accept 'a,b , c' or a YAML list; blank entries are dropped."""
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]


@dataclass
class ProbeConfig:
    """Everything one probe run needs."""

    host: Optional[str] = None
    customer_id: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    pipe_name: Optional[str] = None
    stale_hours: Optional[float] = None
    scheduled_watch: List[str] = field(default_factory=list)
    cookie_jar: str = DEFAULT_COOKIE_JAR
    timeout: int = DEFAULT_TIMEOUT
    verbose: bool = False
    verify: bool = True
    ca_bundle: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProbeConfig":
        """Create config from dictionary."""
        stale_hours = data.get("stale_hours")
        customer_id = data.get("customer_id")
        return cls(
            host=data.get("host"),
            customer_id=str(customer_id) if customer_id is not None else None,
            username=data.get("username"),
            password=data.get("password"),
            pipe_name=data.get("pipe_name"),
            stale_hours=float(stale_hours) if stale_hours is not None else None,
            scheduled_watch=parse_watch_list(data.get("scheduled_watch")),
            cookie_jar=data.get("cookie_jar", DEFAULT_COOKIE_JAR),
            timeout=int(data.get("timeout", DEFAULT_TIMEOUT)),
            verbose=bool(data.get("verbose", False)),
            verify=bool(data.get("verify", True)),
            ca_bundle=data.get("ca_bundle"),
            user_agent=data.get("user_agent", DEFAULT_USER_AGENT),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "ProbeConfig":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at top level")
        try:
            return cls.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{path}: {e}")

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "ProbeConfig":
        """Load config from path or defaults.

        Checks in order:
        1. Provided path
        2. PRIMO_PIPES_CONFIG env var
        3. ./check_primo_pipes.yaml
        4. ~/.check_primo_pipes.yaml
        5. Default config
        """
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigError(f"config file not found: {config_path}")
            return cls.from_yaml(path)

        paths_to_try = []
        if env_path := os.environ.get(CONFIG_ENV):
            paths_to_try.append(Path(env_path))
        paths_to_try.extend([
            Path("./check_primo_pipes.yaml"),
            Path.home() / ".check_primo_pipes.yaml",
        ])

        for path in paths_to_try:
            if path.exists():
                return cls.from_yaml(path)

        return cls()

    def merge(self, overrides: Dict[str, Any]) -> "ProbeConfig":
        """Apply non-None overrides (e.g. parsed CLI flags) in place."""
        for key, value in overrides.items():
            if value is None or not hasattr(self, key):
                continue
            if key == "scheduled_watch":
                value = parse_watch_list(value)
            setattr(self, key, value)
        if self.password is None:
            self.password = os.environ.get(PASSWORD_ENV)
        return self

    @property
    def tls_verify(self) -> Union[bool, str]:
        """Value for the requests ``verify`` argument."""
        if not self.verify:
            return False
        return self.ca_bundle or DEFAULT_CA_BUNDLE

    def validate(self) -> None:
        missing = [name for name in ("host", "customer_id", "username", "password") if not getattr(self, name)]
        if missing:
            raise ConfigError(f"missing required setting(s): {', '.join(missing)}")
        if not str(self.customer_id).isdigit():
            raise ConfigError(f"customer id must be numeric, got '{self.customer_id}'")
        if self.stale_hours is not None and self.stale_hours <= 0:
            raise ConfigError("stale hours must be positive")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (without the password)."""
        return {
            "host": self.host,
            "customer_id": self.customer_id,
            "username": self.username,
            "pipe_name": self.pipe_name,
            "stale_hours": self.stale_hours,
            "scheduled_watch": list(self.scheduled_watch),
            "cookie_jar": self.cookie_jar,
            "timeout": self.timeout,
            "verbose": self.verbose,
            "verify": self.verify,
            "ca_bundle": self.ca_bundle,
            "user_agent": self.user_agent,
        }
