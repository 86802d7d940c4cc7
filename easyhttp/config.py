"""Configuration file and TLS settings for easyhttp."""

from __future__ import annotations

import os
import ssl
import tomllib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import certifi

from easyhttp.client import NetworkClient, new_client, new_tls_client

# ============================================================================
# XDG Base Directory Configuration
# ============================================================================

# Config: ~/.config/easyhttp/config.toml
CONFIG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "easyhttp"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Checked in order when no CA file is configured
CA_FILE_ENV_VARS = ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE")
CA_DIR_ENV_VAR = "SSL_CERT_DIR"


def expand_path(path: str | None) -> str | None:
    """Expand environment variables and ``~`` in a path."""
    if not path:
        return path
    return os.path.expanduser(os.path.expandvars(path))


@dataclass
class TLSConfig:
    """Trust and identity settings handed to the transport."""

    ca_file: str | None = None
    ca_dir: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    verify: bool = True

    def ssl_context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context(
            cafile=expand_path(self.ca_file) or certifi.where(),
            capath=expand_path(self.ca_dir),
        )
        if self.cert_file:
            ctx.load_cert_chain(expand_path(self.cert_file), expand_path(self.key_file))  # type: ignore[arg-type]
        if not self.verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        return ctx

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# ============================================================================
# Config Functions
# ============================================================================


def load_config() -> dict[str, Any]:
    """Load configuration from TOML config file."""
    if CONFIG_FILE.exists():
        with CONFIG_FILE.open("rb") as f:
            return tomllib.load(f)
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to TOML config file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    # Top-level keys must precede the first table header
    lines = [f"{k} = {_toml_value(v)}" for k, v in config.items() if not isinstance(v, dict)]
    for key, value in config.items():
        if isinstance(value, dict):
            lines.append(f"[{key}]")
            lines.extend(f"{k} = {_toml_value(v)}" for k, v in value.items())
            lines.append("")

    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return str(value)


def load_tls_config() -> TLSConfig | None:
    """Load TLS settings from the ``[tls]`` config section and SSL env vars.

    Returns None when neither source says anything, meaning transport defaults.
    """
    section = load_config().get("tls", {})
    if not isinstance(section, dict):
        section = {}

    ca_file = section.get("ca_file")
    if not ca_file:
        ca_file = next((os.environ[v] for v in CA_FILE_ENV_VARS if os.environ.get(v)), None)
    ca_dir = section.get("ca_dir") or os.environ.get(CA_DIR_ENV_VAR) or None

    if not section and not ca_file and not ca_dir:
        return None
    return TLSConfig(
        ca_file=ca_file,
        ca_dir=ca_dir,
        cert_file=section.get("cert_file"),
        key_file=section.get("key_file"),
        verify=bool(section.get("verify", True)),
    )


def client_from_config(tls: TLSConfig | None = None) -> NetworkClient:
    """Network client using ``tls`` or, failing that, the configured TLS settings."""
    tls = tls or load_tls_config()
    if tls is None:
        return new_client()
    return new_tls_client(tls.ssl_context())
