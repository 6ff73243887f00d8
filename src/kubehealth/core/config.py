# src/kubehealth/core/config.py

import os
import re

from dotenv import load_dotenv

from ..models.health import MonitorConfig, MonitorId

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

# Defaults shipped with the agent's health monitor configuration.
DEFAULT_WARN_PERCENTAGE = 80.0
DEFAULT_FAIL_PERCENTAGE = 90.0
DEFAULT_STATE_THRESHOLD_PERCENTAGE = 90.0

_MONITOR_ENV_PREFIXES = {
    MonitorId.CONTAINER_CPU: "CPU_MONITOR",
    MonitorId.CONTAINER_MEMORY: "MEMORY_MONITOR",
}


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- Telemetry variables ---
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")
    TELEMETRY_ENABLED = os.getenv("KUBEHEALTH_TELEMETRY_ENABLED", "False").lower() in (
        "true",
        "1",
        "t",
        "y",
        "yes",
    )

    # Cycle interval is a property so that a changed environment is picked up
    # when the scheduler is started.
    @property
    def CYCLE_INTERVAL(self) -> str:
        return os.getenv("CYCLE_INTERVAL", "1m")

    @staticmethod
    def _get_percentage(key: str, default: float) -> float:
        raw = os.getenv(key)
        if raw is None or raw == "":
            return default
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"{key} must be a number, got '{raw}'.")

    def get_monitor_config(self, monitor_id: MonitorId) -> MonitorConfig:
        """
        Builds the threshold configuration for a monitor from
        <PREFIX>_WARN_PERCENTAGE, <PREFIX>_FAIL_PERCENTAGE and
        <PREFIX>_STATE_THRESHOLD_PERCENTAGE.
        """
        prefix = _MONITOR_ENV_PREFIXES[MonitorId(monitor_id)]
        return MonitorConfig(
            warn_threshold_percentage=self._get_percentage(f"{prefix}_WARN_PERCENTAGE", DEFAULT_WARN_PERCENTAGE),
            fail_threshold_percentage=self._get_percentage(f"{prefix}_FAIL_PERCENTAGE", DEFAULT_FAIL_PERCENTAGE),
            state_threshold_percentage=self._get_percentage(
                f"{prefix}_STATE_THRESHOLD_PERCENTAGE", DEFAULT_STATE_THRESHOLD_PERCENTAGE
            ),
        )

    @staticmethod
    def parse_interval(interval: str) -> int:
        """Converts a duration string like '30s', '1m' or '2h' into seconds."""
        match = re.match(r"^(\d+)([smh])$", interval.lower())
        if not match:
            raise ValueError(f"Invalid interval format: '{interval}'. Use 's', 'm', or 'h'.")
        value, unit = int(match.group(1)), match.group(2)
        multipliers = {"s": 1, "m": 60, "h": 3600}
        seconds = value * multipliers[unit]
        if seconds <= 0:
            raise ValueError(f"Interval must be positive, got '{interval}'.")
        return seconds

    def validate_instance(self):
        for monitor_id in MonitorId:
            # MonitorConfig enforces ranges and warn <= fail.
            try:
                self.get_monitor_config(monitor_id)
            except ValueError as e:
                raise ValueError(f"Invalid configuration for monitor '{monitor_id.value}': {e}") from e
        self.parse_interval(self.CYCLE_INTERVAL)
        if self.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR or CRITICAL.")


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
