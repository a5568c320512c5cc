"""Typed pipeline configuration.

The configuration is resolved once per run from an optional `releaser.toml`
plus a few environment overrides, then passed explicitly to every stage:

    bin_name = "seeker"
    release_branch = "master"
    dns = "8.8.8.8"

    [static_link]
    SODIUM_BUILD_STATIC = "yes"

    [[variants]]
    name = "Linux Build"
    os = "linux"
    compressor_install = ["sudo", "apt-get", "install", "-y", "upx"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_float,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "PipelineConfig",
    "VariantSpec",
    "apply_env_overrides",
    "default_variants",
    "load_config",
    "resolve_config",
]

CONFIG_FILE_NAME = "releaser.toml"

DEFAULT_RELEASE_BRANCH = "master"
DEFAULT_DNS = "8.8.8.8"
DEFAULT_TOKEN_ENV = "TOKEN"
DEFAULT_ARTIFACTS_DIR = "artifacts"
DEFAULT_STEP_TIMEOUT_SECONDS = 60 * 60.0


def _default_static_link() -> dict[str, str]:
    return {
        "SODIUM_BUILD_STATIC": "yes",
        "SODIUM_STATIC": "yes",
        "OPENSSL_STATIC": "yes",
    }


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or is invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class VariantSpec:
    """One target operating system.

    Attributes:
        name: Human-readable job name (e.g. "Linux Build").
        os_id: OS identifier used in artifact names (e.g. "linux").
        compressor_install: Command installing the binary compressor there.
    """

    name: str
    os_id: str
    compressor_install: tuple[str, ...]


def default_variants() -> tuple[VariantSpec, ...]:
    return (
        VariantSpec(name="macOS Build", os_id="osx", compressor_install=("brew", "install", "upx")),
        VariantSpec(
            name="Linux Build",
            os_id="linux",
            compressor_install=("sudo", "apt-get", "install", "-y", "upx"),
        ),
    )


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable configuration for one pipeline run.

    The static-link toggles and the DNS address are opaque to the
    orchestrator; they only travel to the tools as environment.
    """

    bin_name: str
    static_link: Mapping[str, str] = field(default_factory=_default_static_link)
    dns: str = DEFAULT_DNS
    release_branch: str = DEFAULT_RELEASE_BRANCH
    token_env: str = DEFAULT_TOKEN_ENV
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR
    step_timeout: float = DEFAULT_STEP_TIMEOUT_SECONDS
    variants: tuple[VariantSpec, ...] = field(default_factory=default_variants)

    @property
    def artifact_glob(self) -> str:
        return f"{self.bin_name}-*"

    def artifact_name(self, os_id: str) -> str:
        return f"{self.bin_name}-{os_id}"

    def build_env(self) -> dict[str, str]:
        """Pass-through environment for the toolchain invocations."""
        env = dict(self.static_link)
        env["DNS"] = self.dns
        return env

    def variant(self, os_id: str) -> VariantSpec | None:
        for v in self.variants:
            if v.os_id == os_id:
                return v
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[PipelineConfig, str]:
        """Create a config from parsed TOML, returning a message on bad input."""
        bin_name = get_str(data, "bin_name")
        if bin_name is None:
            return Err("bin_name is required")

        static_link: dict[str, str] = _default_static_link()
        static_tbl = get_table(data, "static_link")
        if static_tbl is not None:
            static_link = {}
            for key, value in static_tbl.items():
                if not isinstance(value, str):
                    return Err(f"static_link.{key} must be a string")
                static_link[key] = value

        step_timeout = get_float(data, "step_timeout")
        if step_timeout is not None and step_timeout <= 0:
            return Err("step_timeout must be positive")

        variants = default_variants()
        raw_variants = get_list(data, "variants")
        if raw_variants is not None:
            parsed: list[VariantSpec] = []
            for i, item in enumerate(raw_variants):
                tbl = as_str_dict(item)
                if tbl is None:
                    return Err(f"variants[{i}] must be a table")
                os_id = get_str(tbl, "os")
                if os_id is None:
                    return Err(f"variants[{i}].os is required")
                install = get_str_list(tbl, "compressor_install")
                if not install:
                    return Err(f"variants[{i}].compressor_install must be a non-empty list")
                parsed.append(
                    VariantSpec(
                        name=get_str(tbl, "name") or f"{os_id} build",
                        os_id=os_id,
                        compressor_install=tuple(install),
                    )
                )
            variants = tuple(parsed)

        config = cls(
            bin_name=bin_name,
            static_link=static_link,
            dns=get_str(data, "dns") or DEFAULT_DNS,
            release_branch=get_str(data, "release_branch") or DEFAULT_RELEASE_BRANCH,
            token_env=get_str(data, "token_env") or DEFAULT_TOKEN_ENV,
            artifacts_dir=get_str(data, "artifacts_dir") or DEFAULT_ARTIFACTS_DIR,
            step_timeout=step_timeout or DEFAULT_STEP_TIMEOUT_SECONDS,
            variants=variants,
        )
        return validate(config)


def validate(config: PipelineConfig) -> Result[PipelineConfig, str]:
    if not config.bin_name.strip():
        return Err("bin_name must not be empty")
    if "/" in config.bin_name or "\\" in config.bin_name:
        return Err(f"bin_name must be a plain file name: {config.bin_name}")
    if not config.variants:
        return Err("at least one variant is required")

    seen: set[str] = set()
    for v in config.variants:
        # Artifact names are keyed by os_id; duplicates would overwrite each other.
        if v.os_id in seen:
            return Err(f"duplicate variant os: {v.os_id}")
        seen.add(v.os_id)
        if not v.compressor_install:
            return Err(f"variant {v.os_id} has no compressor install command")
    return Ok(config)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[PipelineConfig, ConfigError]:
    """Load and validate configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    config = PipelineConfig.from_dict(result.value)
    if isinstance(config, Err):
        return Err(ConfigError(f"Invalid config: {config.error}", path=path))
    return config


def apply_env_overrides(
    config: PipelineConfig, environ: Mapping[str, str]
) -> Result[PipelineConfig, ConfigError]:
    """Apply BIN_NAME / DNS / RELEASE_BRANCH from the CI environment."""
    changes: dict[str, str] = {}
    for env_key, attr in (
        ("BIN_NAME", "bin_name"),
        ("DNS", "dns"),
        ("RELEASE_BRANCH", "release_branch"),
    ):
        value = environ.get(env_key, "").strip()
        if value:
            changes[attr] = value

    static_link = dict(config.static_link)
    for key in static_link:
        value = environ.get(key, "").strip()
        if value:
            static_link[key] = value

    updated = replace(config, static_link=static_link, **changes)
    checked = validate(updated)
    if isinstance(checked, Err):
        return Err(ConfigError(f"Invalid config: {checked.error}"))
    return checked


def resolve_config(
    path: Path | None, environ: Mapping[str, str]
) -> Result[PipelineConfig, ConfigError]:
    """Resolve the run configuration.

    An explicit path must exist. Without a path, `releaser.toml` in the
    current directory is used when present; otherwise the defaults apply and
    BIN_NAME must come from the environment.
    """
    if path is None:
        candidate = Path.cwd() / CONFIG_FILE_NAME
        path = candidate if candidate.exists() else None

    if path is not None:
        loaded = load_config(path)
        if isinstance(loaded, Err):
            return loaded
        return apply_env_overrides(loaded.value, environ)

    bin_name = environ.get("BIN_NAME", "").strip()
    if not bin_name:
        return Err(ConfigError(f"No {CONFIG_FILE_NAME} found and BIN_NAME is not set"))
    return apply_env_overrides(PipelineConfig(bin_name=bin_name), environ)
