import os
from dataclasses import dataclass

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False
    libreoffice_bin: str = "libreoffice"
    convert_timeout_sec: float | None = None
    max_upload_mb: int = 300
    log_level: str = "INFO"


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Read configuration from the environment once.

    Unset PORT falls back to 8080. CONVERT_TIMEOUT_SEC left unset (or empty)
    means the converter may run without a time limit.
    """
    env = os.environ if environ is None else environ
    timeout = env.get("CONVERT_TIMEOUT_SEC", "").strip()
    return Settings(
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT") or "8080"),
        reload=env.get("RELOAD", "false").lower() in TRUTHY,
        libreoffice_bin=env.get("LIBREOFFICE_BIN") or "libreoffice",
        convert_timeout_sec=float(timeout) if timeout else None,
        max_upload_mb=int(env.get("MAX_UPLOAD_MB", "300")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
