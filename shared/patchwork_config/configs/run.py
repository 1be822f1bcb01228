"""
Run settings: polling cadence, deadlines, monitor concurrency and the
error policy.

Sources (later wins):
1. Defaults
2. ~/.config/patchwork/config.yaml
3. PATCHWORK_* environment variables
"""

import os
from dataclasses import dataclass
from typing import Any

from ..base import BaseConfig, HealthCheckResult, ValidationResult
from ..utils import load_yaml_file, parse_bool, parse_float, parse_int, settings_file
from ..validators import validate_positive_number


DEFAULT_POLL_INTERVAL = 120.0  # 2 minutes between CI polls


@dataclass
class RunConfig(BaseConfig):
    """Settings that shape one apply run.

    Attributes:
        poll_interval: Seconds between CI polls for a repository
        max_wait: Seconds to wait for a finished build before reporting a
            timeout (None waits forever)
        max_monitors: Upper bound on concurrent build monitors (None means
            one per repository)
        fail_fast: Abort the whole run on the first infrastructure error
        log_file: Optional JSON log file
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_wait: float | None = None
    max_monitors: int | None = None
    fail_fast: bool = True
    log_file: str | None = None

    def validate(self) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []

        for value, name, allow_none in (
            (self.poll_interval, "poll_interval", False),
            (self.max_wait, "max_wait", True),
            (self.max_monitors, "max_monitors", True),
        ):
            is_valid, error = validate_positive_number(value, name, allow_none=allow_none)
            if not is_valid:
                errors.append(error)

        if self.max_monitors is not None and not isinstance(self.max_monitors, int):
            errors.append(f"max_monitors must be an integer, got: {self.max_monitors!r}")

        if not isinstance(self.fail_fast, bool):
            errors.append(f"fail_fast must be true or false, got: {self.fail_fast!r}")

        if self.max_wait is None:
            warnings.append("max_wait is unset; a repository whose build never finishes is polled forever")

        return ValidationResult.from_checks(errors, warnings)

    def health_check(self, timeout: float = 5.0) -> HealthCheckResult:
        """Run settings are local; healthy whenever they validate."""
        result = self.validate()
        if result.is_valid:
            return HealthCheckResult(healthy=True, service_name="run", message="Settings valid")
        return HealthCheckResult(healthy=False, service_name="run", message="; ".join(result.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "poll_interval": self.poll_interval,
            "max_wait": self.max_wait,
            "max_monitors": self.max_monitors,
            "fail_fast": self.fail_fast,
            "log_file": self.log_file,
        }

    @classmethod
    def from_env(cls) -> "RunConfig":
        """Load run settings.

        Raises:
            ValueError: If config.yaml or an environment override is malformed
        """
        config = cls()

        settings = load_yaml_file(settings_file())
        config.poll_interval = settings.get("poll_interval", config.poll_interval)
        config.max_wait = settings.get("max_wait", config.max_wait)
        config.max_monitors = settings.get("max_monitors", config.max_monitors)
        config.fail_fast = settings.get("fail_fast", config.fail_fast)
        if isinstance(config.fail_fast, str):
            parsed = parse_bool(config.fail_fast, None)
            if parsed is None:
                raise ValueError(f"Invalid fail_fast in config.yaml: {config.fail_fast!r}")
            config.fail_fast = parsed
        config.log_file = settings.get("log_file", config.log_file)

        try:
            config.poll_interval = parse_float(os.environ.get("PATCHWORK_POLL_INTERVAL"), config.poll_interval)
            config.max_wait = parse_float(os.environ.get("PATCHWORK_MAX_WAIT"), config.max_wait)
            config.max_monitors = parse_int(os.environ.get("PATCHWORK_MAX_MONITORS"), config.max_monitors)
        except ValueError as e:
            raise ValueError(f"Invalid PATCHWORK_* setting: {e}") from e
        config.fail_fast = parse_bool(os.environ.get("PATCHWORK_FAIL_FAST"), config.fail_fast)
        config.log_file = os.environ.get("PATCHWORK_LOG_FILE", config.log_file)

        return config
