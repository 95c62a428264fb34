"""
Configuration for the analyzer and its web server.

Values come from ``GRAMMAR_ANALYZER_*`` environment variables, falling back
to the defaults below.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "GRAMMAR_ANALYZER_"


def _env(environ: Mapping[str, str], name: str, default: str) -> str:
    return environ.get(ENV_PREFIX + name, default)


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AnalyzerConfig:
    """Settings for semantic analysis."""
    default_type: str = "int"  # Type given to implicitly declared identifiers
    global_scope: str = "global"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'AnalyzerConfig':
        environ = os.environ if environ is None else environ
        return cls(
            default_type=_env(environ, "DEFAULT_TYPE", cls.default_type),
            global_scope=_env(environ, "GLOBAL_SCOPE", cls.global_scope),
        )


@dataclass
class ServerConfig:
    """Settings for the Flask server."""
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServerConfig':
        environ = os.environ if environ is None else environ
        port_text = _env(environ, "PORT", str(cls.port))
        try:
            port = int(port_text)
        except ValueError:
            raise ValueError(f"Invalid {ENV_PREFIX}PORT value: {port_text!r}")
        return cls(
            host=_env(environ, "HOST", cls.host),
            port=port,
            debug=_env_bool(environ, "DEBUG", cls.debug),
            log_level=_env(environ, "LOG_LEVEL", cls.log_level).upper(),
        )
