import os
from dataclasses import dataclass


_TRUTHY = {"1", "true", "yes", "on"}


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings handed to `create_app`.

    Defaults reproduce the service's fixed layout: `./uploads` and `./output`
    next to the working directory, port 8080, a 10 MiB upload limit and a
    five minute retention window after the first download.
    """

    upload_dir: str = "./uploads"
    output_dir: str = "./output"
    host: str = "0.0.0.0"
    port: int = 8080
    max_file_size: int = 10 * 1024 * 1024
    retention_delay: float = 300.0
    # Sweeper is off unless a TTL is set
    artifact_ttl: float | None = None
    sweep_interval: float = 60.0
    log_level: str = "INFO"
    reload: bool = False

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Build a config from environment variables, falling back to defaults."""
        return cls(
            upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
            output_dir=os.getenv("OUTPUT_DIR", "./output"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            max_file_size=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            retention_delay=float(os.getenv("RETENTION_DELAY_SEC", "300")),
            artifact_ttl=_optional_float(os.getenv("ARTIFACT_TTL_SEC")),
            sweep_interval=float(os.getenv("SWEEP_INTERVAL_SEC", "60")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            reload=os.getenv("RELOAD", "false").lower() in _TRUTHY,
        )
