import os
from typing import Optional

TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is required")
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://") :]
    return url


def platform_base_url() -> str:
    return os.environ.get("INSTALLATIONS_PLATFORM_API_BASE", "http://localhost:8080").rstrip("/")


def oidc_app_id() -> str:
    return os.environ.get("INSTALLATIONS_OIDC_APP_ID", "installations.platform").strip() or "installations.platform"


def oidc_enabled() -> bool:
    return env_flag("INSTALLATIONS_OIDC_ENABLED", False)


def jwt_issuer() -> str:
    return os.environ.get("INSTALLATIONS_JWT_ISSUER", "solarbiz-installations")


def jwt_audience() -> str:
    return os.environ.get("INSTALLATIONS_JWT_AUDIENCE", "installations")


def log_level() -> str:
    return os.environ.get("INSTALLATIONS_LOG_LEVEL", "INFO").strip().upper() or "INFO"


def notifications_enabled() -> bool:
    return env_flag("INSTALLATIONS_NOTIFY_ENABLED", True)


def notify_transport() -> str:
    return os.environ.get("INSTALLATIONS_NOTIFY_TRANSPORT", "log").strip().lower() or "log"


def notify_from_address() -> str:
    return (
        os.environ.get("INSTALLATIONS_NOTIFY_FROM", "").strip()
        or "SolarBiz <installations@solarbiz.com>"
    )


def notify_timeout() -> float:
    raw = os.environ.get("INSTALLATIONS_NOTIFY_TIMEOUT", "").strip()
    try:
        return float(raw) if raw else 10.0
    except ValueError:
        return 10.0


def ses_region() -> str:
    return str(
        os.environ.get("INSTALLATIONS_SES_REGION")
        or os.environ.get("AWS_DEFAULT_REGION")
        or os.environ.get("AWS_REGION")
        or ""
    ).strip()


def resolve_secret_ref(ref_text: str) -> Optional[str]:
    """Resolve ``env:NAME`` references; plain values are returned as-is."""
    value = str(ref_text or "").strip()
    if not value:
        return None
    if value.startswith("env:"):
        resolved = os.environ.get(value.split(":", 1)[1].strip(), "").strip()
        return resolved or None
    return value


def resend_api_key() -> Optional[str]:
    return resolve_secret_ref(os.environ.get("INSTALLATIONS_RESEND_API_KEY_REF", "env:RESEND_API_KEY"))
