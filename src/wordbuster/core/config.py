"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from wordbuster.core.exceptions import ConfigurationError


def describe_validation_error(error: ValidationError) -> str:
    """One-line summary of every field that failed validation."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "Invalid configuration: " + "; ".join(problems)


class RunSettings(BaseSettings):
    """Engine-wide run configuration."""

    model_config = SettingsConfigDict(env_prefix="WORDBUSTER_RUN_", validate_assignment=True)

    threads: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Maximum number of probes in flight at once"
    )

    delay_ms: Optional[float] = Field(
        default=None,
        ge=0,
        description="Delay each worker sleeps before issuing a probe, in milliseconds"
    )

    quiet: bool = Field(
        default=False,
        description="Suppress banner and non-essential output"
    )

    verbose: bool = Field(
        default=False,
        description="Echo probe errors to the console"
    )

    no_progress: bool = Field(
        default=False,
        description="Disable the progress bar"
    )

    wildcard_check: bool = Field(
        default=True,
        description="Probe synthetic candidates before the run to detect catch-all responses"
    )

    force_wildcard: bool = Field(
        default=False,
        description="Continue after a wildcard is detected, suppressing matching responses"
    )


class HttpSettings(BaseSettings):
    """HTTP client configuration shared by the HTTP-based modes."""

    model_config = SettingsConfigDict(env_prefix="WORDBUSTER_HTTP_", validate_assignment=True)

    user_agent: str = Field(
        default="wordbuster/1.0",
        description="User-Agent header for requests"
    )

    timeout: float = Field(
        default=10,
        gt=0,
        le=300,
        description="HTTP request timeout in seconds"
    )

    insecure: bool = Field(
        default=False,
        description="Skip TLS certificate verification"
    )

    follow_redirects: bool = Field(
        default=False,
        description="Follow HTTP redirects"
    )

    proxy: Optional[str] = Field(
        default=None,
        description="Proxy URL (http://host:port or socks5://host:port)"
    )

    headers: list[str] = Field(
        default_factory=list,
        description="Extra headers in 'Name: value' form"
    )

    cookies: Optional[str] = Field(
        default=None,
        description="Raw Cookie header value"
    )

    username: Optional[str] = Field(
        default=None,
        description="HTTP Basic Auth username"
    )

    password: Optional[str] = Field(
        default=None,
        description="HTTP Basic Auth password"
    )

    method: str = Field(
        default="GET",
        description="HTTP method to use"
    )


class DnsSettings(BaseSettings):
    """DNS resolver configuration."""

    model_config = SettingsConfigDict(env_prefix="WORDBUSTER_DNS_", validate_assignment=True)

    resolver: Optional[str] = Field(
        default=None,
        description="Custom resolver as IP or IP:port"
    )

    timeout: float = Field(
        default=5,
        gt=0,
        le=120,
        description="Resolution timeout in seconds"
    )


class BucketSettings(BaseSettings):
    """Object-storage bucket enumeration configuration."""

    model_config = SettingsConfigDict(env_prefix="WORDBUSTER_BUCKET_", validate_assignment=True)

    max_files: int = Field(
        default=5,
        ge=0,
        le=1000,
        description="Maximum object keys listed for a public bucket"
    )

    timeout: float = Field(
        default=10,
        gt=0,
        le=300,
        description="HTTP request timeout in seconds"
    )


class TftpSettings(BaseSettings):
    """TFTP probing configuration."""

    model_config = SettingsConfigDict(env_prefix="WORDBUSTER_TFTP_", validate_assignment=True)

    timeout: float = Field(
        default=5,
        gt=0,
        le=120,
        description="Time to wait for the first reply datagram, in seconds"
    )

    max_concurrency: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Upper bound on concurrent UDP probes regardless of thread count"
    )

    block_size: int = Field(
        default=512,
        ge=8,
        le=65464,
        description="blksize option sent with each read request"
    )


class OutputSettings(BaseSettings):
    """Output configuration."""

    model_config = SettingsConfigDict(env_prefix="WORDBUSTER_OUTPUT_", validate_assignment=True)

    output_file: Optional[Path] = Field(
        default=None,
        description="Write matches to this file (.json selects JSON-array mode)"
    )

    no_color: bool = Field(
        default=False,
        description="Disable colored console output"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for diagnostic logging on stderr"
    )

    log_json: bool = Field(
        default=False,
        description="Emit diagnostic logs as JSON"
    )

    log_file: Optional[Path] = Field(
        default=None,
        description="Also write diagnostic logs to this file"
    )


class RunConfig(BaseModel):
    """Immutable snapshot of the settings the engine reads during a run."""

    model_config = ConfigDict(frozen=True)

    threads: int = Field(default=10, ge=1)
    delay: float = 0.0
    timeout: float = 10.0
    quiet: bool = False
    verbose: bool = False
    show_progress: bool = True
    wildcard_check: bool = True
    force_wildcard: bool = False


class Settings(BaseSettings):
    """Main configuration container."""

    model_config = SettingsConfigDict(
        env_prefix="WORDBUSTER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # Sub-configurations
    run: RunSettings = Field(default_factory=RunSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    dns: DnsSettings = Field(default_factory=DnsSettings)
    bucket: BucketSettings = Field(default_factory=BucketSettings)
    tftp: TftpSettings = Field(default_factory=TftpSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    def run_config(self, timeout: float | None = None) -> RunConfig:
        """Snapshot the run-wide settings.

        Args:
            timeout: Per-probe timeout of the selected mode (defaults to HTTP)
        """
        return RunConfig(
            threads=self.run.threads,
            delay=(self.run.delay_ms or 0) / 1000.0,
            timeout=timeout if timeout is not None else self.http.timeout,
            quiet=self.run.quiet,
            verbose=self.run.verbose,
            show_progress=not (self.run.quiet or self.run.no_progress),
            wildcard_check=self.run.wildcard_check,
            force_wildcard=self.run.force_wildcard,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML configuration file.

        Raises:
            ConfigurationError: If the file is not valid YAML or holds invalid values
        """
        import yaml

        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read config file '{path}': {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file '{path}' must contain a mapping")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Config file '{path}': {describe_validation_error(e)}") from e

    @classmethod
    def from_file_or_default(cls, path: Path | None = None) -> "Settings":
        """Load from file if exists, otherwise return defaults."""
        default_paths = [
            Path("wordbuster.yaml"),
            Path("wordbuster.yml"),
            Path(".wordbuster.yaml"),
            Path.home() / ".config" / "wordbuster" / "config.yaml",
        ]

        if path and path.exists():
            return cls.from_yaml(path)

        for default_path in default_paths:
            if default_path.exists():
                return cls.from_yaml(default_path)

        return cls()
