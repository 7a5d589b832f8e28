"""Typed configuration for the publisher.

Settings come from three layers, later ones winning:

1. Built-in defaults (public github.com endpoints)
2. An optional ``apk-release.toml`` file
3. Environment variables (``GITHUB_TOKEN``/``GH_TOKEN``, ``GITHUB_API_URL``,
   ``GITHUB_SERVER_URL``)

The result is a frozen ``PublishConfig`` handed to the publishers at
construction; nothing below the CLI reads ``os.environ`` directly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "ArchiveConfig",
    "ConfigError",
    "DEFAULT_CONFIG_FILENAME",
    "GitHubConfig",
    "HttpConfig",
    "PublishConfig",
    "load_config",
    "load_publish_config",
]

DEFAULT_CONFIG_FILENAME = "apk-release.toml"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_UPLOADS_URL = "https://uploads.github.com"
DEFAULT_WEB_URL = "https://github.com"
DEFAULT_ARCHIVE_PREFIX = "apks"
DEFAULT_HTTP_TIMEOUT = 60.0

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Where releases live."""

    repo: str | None = None
    api_url: str = DEFAULT_API_URL
    uploads_url: str = DEFAULT_UPLOADS_URL
    web_url: str = DEFAULT_WEB_URL


@dataclass(frozen=True, slots=True)
class ArchiveConfig:
    prefix: str = DEFAULT_ARCHIVE_PREFIX


@dataclass(frozen=True, slots=True)
class HttpConfig:
    timeout: float = DEFAULT_HTTP_TIMEOUT


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Main configuration container."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    token: str | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PublishConfig:
        """Create config from a mapping (parsed TOML)."""
        github: StrDict = get_table(data, "github") or {}
        archive: StrDict = get_table(data, "archive") or {}
        http: StrDict = get_table(data, "http") or {}

        timeout = http.get("timeout", DEFAULT_HTTP_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError(f"http.timeout must be a positive number, got {timeout!r}")

        return cls(
            github=GitHubConfig(
                repo=get_str(github, "repo"),
                api_url=_strip_slash(get_str(github, "api_url") or DEFAULT_API_URL),
                uploads_url=_strip_slash(get_str(github, "uploads_url") or DEFAULT_UPLOADS_URL),
                web_url=_strip_slash(get_str(github, "web_url") or DEFAULT_WEB_URL),
            ),
            archive=ArchiveConfig(prefix=get_str(archive, "prefix") or DEFAULT_ARCHIVE_PREFIX),
            http=HttpConfig(timeout=float(timeout)),
        )

    def with_env(self, env: Mapping[str, str]) -> PublishConfig:
        """Overlay environment variables on top of this config."""
        token: str | None = self.token
        for name in TOKEN_ENV_VARS:
            value = env.get(name, "").strip()
            if value:
                token = value
                break

        github = self.github
        api_url = env.get("GITHUB_API_URL", "").strip()
        if api_url:
            github = replace(github, api_url=_strip_slash(api_url))
        server_url = env.get("GITHUB_SERVER_URL", "").strip()
        if server_url:
            github = replace(github, web_url=_strip_slash(server_url))

        return replace(self, github=github, token=token)


def _strip_slash(url: str) -> str:
    return url.rstrip("/")


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


def load_config(path: Path) -> Result[PublishConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(PublishConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(PublishConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_publish_config(
    *,
    cwd: Path,
    env: Mapping[str, str],
    path: Path | None = None,
) -> Result[PublishConfig, ConfigError]:
    """Build the effective config for one run.

    An explicit ``path`` must exist. Without one, ``apk-release.toml`` in
    ``cwd`` is used when present, otherwise the defaults.
    """
    if path is None:
        candidate = cwd / DEFAULT_CONFIG_FILENAME
        if not candidate.is_file():
            return Ok(PublishConfig().with_env(env))
        path = candidate

    loaded = load_config(path)
    if isinstance(loaded, Err):
        return loaded
    return Ok(loaded.value.with_env(env))
