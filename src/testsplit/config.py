"""Configuration management for TestSplit."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from testsplit.core.inventory import DEFAULT_DURATION_MS

DEFAULT_BRANCH = "master"
DEFAULT_ARTIFACT_PATTERN = r"^.+?nightwatch_output$"
ARTIFACTS_URL_TEMPLATE = (
    "https://circleci.com/api/v1/project/%user%/%project%/latest/artifacts"
    "?branch=%branch%&filter=successful&circle-token=%access-token%"
)
CONFIG_NAMES = ["testsplit.json", ".testsplit.json"]
MODES = ("copy", "delete")


class ConfigurationError(Exception):
    """Raised when options are missing or inconsistent."""

    pass


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


class CircleCIConfig(BaseModel):
    """Where to fetch the previous run's timing artifacts from."""

    user: Optional[str] = Field(
        default_factory=lambda: os.environ.get("CIRCLE_PROJECT_USERNAME"),
        description="Project owner (defaults to CIRCLE_PROJECT_USERNAME)",
    )
    project: Optional[str] = Field(
        default_factory=lambda: os.environ.get("CIRCLE_PROJECT_REPONAME"),
        description="Project name (defaults to CIRCLE_PROJECT_REPONAME)",
    )
    branch: str = Field(default=DEFAULT_BRANCH, description="Branch whose latest build is used")
    access_token: Optional[str] = Field(default=None, description="CircleCI API token")
    artifact_pattern: str = Field(
        default=DEFAULT_ARTIFACT_PATTERN, description="Regex an artifact URL must fully match"
    )
    artifacts_url_template: str = Field(
        default=ARTIFACTS_URL_TEMPLATE, description="Artifact listing URL with %key% placeholders"
    )
    timeout_seconds: int = Field(default=30, description="HTTP request timeout")
    max_concurrency: int = Field(default=8, description="Parallel artifact downloads")

    @field_validator("timeout_seconds", "max_concurrency")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Must be at least 1")
        return v

    def url_options(self) -> dict[str, str]:
        """Values substituted into the artifact listing URL template."""
        return {
            "user": self.user or "",
            "project": self.project or "",
            "branch": self.branch,
            "access-token": self.access_token or "",
        }


class TimingConfig(BaseModel):
    """How test costs are estimated."""

    source: str = Field(default="console", description="Timing source (console, json)")
    extensions: list[str] = Field(default_factory=lambda: [".js"], description="Test file suffixes in console output")
    default_duration_ms: int = Field(
        default=DEFAULT_DURATION_MS, description="Weight for tests without history"
    )

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        allowed = {"console", "json"}
        if v.lower() not in allowed:
            raise ValueError(f"Timing source must be one of: {allowed}")
        return v.lower()

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        if not v or not all(ext.strip() for ext in v):
            raise ValueError("At least one non-empty test file extension is required")
        return v

    @field_validator("default_duration_ms")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Default duration cannot be negative")
        return v


class SplitConfig(BaseModel):
    """How tests are split across workers."""

    node_total: int = Field(
        default_factory=lambda: _env_int("CIRCLE_NODE_TOTAL", 1),
        description="Count of nodes (workers), defaults to CIRCLE_NODE_TOTAL",
    )
    node_index: Optional[int] = Field(
        default_factory=lambda: _env_int("CIRCLE_NODE_INDEX", None),
        description="Only distribute this bucket (defaults to CIRCLE_NODE_INDEX)",
    )
    mode: str = Field(default="copy", description="Distribution mode (copy, delete)")

    @field_validator("node_total")
    @classmethod
    def validate_node_total(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Count of nodes must be at least 1")
        return v

    @field_validator("node_index")
    @classmethod
    def validate_node_index(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Node index cannot be negative")
        return v

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v.lower() not in MODES:
            raise ValueError("Must be one of copy or delete.")
        return v.lower()


class TestSplitConfig(BaseModel):
    """Main configuration for TestSplit."""

    circleci: CircleCIConfig = Field(default_factory=CircleCIConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    split: SplitConfig = Field(default_factory=SplitConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "TestSplitConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid configuration file {path}: {e}")

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "TestSplitConfig":
        """Load the nearest configuration file up the tree, or the defaults."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        current = start_dir.resolve()
        for directory in [current, *current.parents]:
            for name in CONFIG_NAMES:
                config_path = directory / name
                if config_path.exists():
                    return cls.from_file(config_path)

        return cls()

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def validate_for_run(self) -> None:
        """Check cross-field requirements before any work is done."""
        if self.split.node_total > 1 and not self.circleci.access_token:
            raise ConfigurationError(
                "Access token (--access-token option) is required when count of nodes (workers) > 1"
            )


def get_default_config() -> TestSplitConfig:
    """Return a default configuration."""
    return TestSplitConfig(
        circleci=CircleCIConfig(user=None, project=None),
        timing=TimingConfig(),
        split=SplitConfig(node_total=1, node_index=None, mode="copy"),
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.circleci.user = "my-org"
    config.circleci.project = "my-project"
    config.to_file(output_path)
    return output_path
