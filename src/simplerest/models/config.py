"""Pydantic configuration models for simplerest."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from urllib3.util import Timeout

DEFAULT_TIMEOUT = 15.0
UNLIMITED_TIMEOUT = 0.0


class TimeUnit(str, Enum):
    """Units accepted for timeout values."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"

    @property
    def factor(self) -> float:
        """Number of seconds in one unit."""
        return {
            TimeUnit.MILLISECONDS: 0.001,
            TimeUnit.SECONDS: 1.0,
            TimeUnit.MINUTES: 60.0,
        }[self]


class Timeouts(BaseModel):
    """
    Request timeouts, applied once when the transport is configured.

    A value of 0 means no limit.

    Example:
        Timeouts(connect=5, read=30)
        Timeouts(connect=500, read=2000, unit=TimeUnit.MILLISECONDS)
    """

    connect: float = Field(DEFAULT_TIMEOUT, ge=0, description="Connect timeout for new connections")
    write: float = Field(DEFAULT_TIMEOUT, ge=0, description="Write timeout for new connections")
    read: float = Field(DEFAULT_TIMEOUT, ge=0, description="Read timeout for new connections")
    total: float = Field(UNLIMITED_TIMEOUT, ge=0, description="Timeout for complete calls")
    unit: TimeUnit = Field(TimeUnit.SECONDS, description="Unit of all values above")

    model_config = {"extra": "forbid", "frozen": True}

    def as_seconds(self, value: float) -> Optional[float]:
        """Convert a value in this model's unit to seconds, None meaning unlimited."""
        if value <= 0:
            return None
        return value * self.unit.factor

    def to_urllib3(self) -> Timeout:
        """
        Build the urllib3 timeout handed to requests.

        urllib3 has no dedicated write timeout; sending happens under the
        connect timeout, so the larger of connect and write is used there.
        """
        send_limits = [v for v in (self.connect, self.write) if v > 0]
        connect = self.as_seconds(max(send_limits)) if send_limits else None
        return Timeout(
            total=self.as_seconds(self.total),
            connect=connect,
            read=self.as_seconds(self.read),
        )


class ClientConfig(BaseModel):
    """
    Root configuration model for a SimpleRest client.

    Example:
        config = ClientConfig(
            base_url="https://api.example.com/v1",
            timeouts=Timeouts(connect=5),
            headers={"Accept": "application/json"},
        )

    YAML format:
        base_url: https://api.example.com/v1
        timeouts:
          connect: 5
          read: 30
        headers:
          Accept: application/json
    """

    base_url: str = Field("", description="Base URL prepended to relative request paths")
    timeouts: Timeouts = Field(default_factory=Timeouts)
    headers: dict[str, str] = Field(default_factory=dict, description="Default headers for all requests")
    max_workers: int = Field(4, ge=1, description="Worker threads for blocking calls and file I/O")
    chunk_size: int = Field(8192, ge=1, description="Download buffer size in bytes")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClientConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClientConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
