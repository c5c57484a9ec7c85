import json
import os
from functools import lru_cache
from pathlib import Path as _Path
from typing import Dict, List

from dotenv import load_dotenv as _load_dotenv
from pydantic import BaseModel, Field

# Load .env early; real environment variables win
_load_dotenv(dotenv_path=_Path(__file__).resolve().parent.parent / ".env", override=False)


DEFAULT_ACCESS_POLICY: Dict[str, List[str]] = {
    "users:list": ["admin"],
    "users:make-admin": ["admin"],
    "users:make-premium": ["admin"],
    "contact-requests:list-all": ["admin"],
    "contact-requests:approve": ["admin"],
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _access_policy_default() -> Dict[str, List[str]]:
    policy = {op: list(roles) for op, roles in DEFAULT_ACCESS_POLICY.items()}
    raw = os.getenv("ACCESS_ROLE_POLICY", "").strip()
    if not raw:
        return policy
    overrides = json.loads(raw)
    if not isinstance(overrides, dict):
        raise ValueError("ACCESS_ROLE_POLICY must be a JSON object")
    for operation, roles in overrides.items():
        if isinstance(roles, str):
            roles = [roles]
        policy[str(operation)] = [str(role).strip().lower() for role in roles]
    return policy


class Settings(BaseModel):
    # Support multiple common env var names for Mongo connection string
    mongo_uri: str = Field(
        default_factory=lambda: (
            os.getenv("MONGO_URI")
            or os.getenv("MONGODB_URI")
            or os.getenv("MONGO_URL")
            or ""
        )
    )
    mongo_db: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "matrimonyBD"))
    # Optional: provide a non-SRV fallback URI (e.g., mongodb://127.0.0.1:27017)
    mongo_alt_uri: str = Field(default_factory=lambda: os.getenv("MONGO_ALT_URI", ""))
    # Optional: force direct connection (applies to non-SRV URIs)
    mongo_direct: bool = Field(default_factory=lambda: _env_flag("MONGO_DIRECT"))
    mongo_server_selection_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "3000"))
    )
    mongo_connect_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "3000"))
    )
    mongo_socket_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_SOCKET_TIMEOUT_MS", "5000"))
    )
    # Upper bound for a single repository call, enforced client side
    store_call_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("STORE_CALL_TIMEOUT_MS", "5000"))
    )

    cors_origins: str = Field(
        default_factory=lambda: (
            os.getenv("CORS_ORIGINS")
            or os.getenv("CORS_ORIGIN")
            or "http://localhost:5173,http://127.0.0.1:5173"
        )
    )
    slow_request_ms: int = Field(default_factory=lambda: int(os.getenv("SLOW_REQUEST_MS", "800")))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "5000")))

    # Identity provider (Firebase ID tokens)
    firebase_project_id: str = Field(default_factory=lambda: os.getenv("FIREBASE_PROJECT_ID", ""))
    identity_jwks_url: str = Field(
        default_factory=lambda: os.getenv(
            "IDENTITY_JWKS_URL",
            "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com",
        )
    )

    # Payment gateway (Stripe)
    payment_gateway_key: str = Field(
        default_factory=lambda: (
            os.getenv("PAYMENT_GATEWAY_KEY")
            or os.getenv("STRIPE_SECRET_KEY")
            or ""
        )
    )
    payment_currency: str = Field(default_factory=lambda: os.getenv("PAYMENT_CURRENCY", "usd"))
    verify_contact_payments: bool = Field(default_factory=lambda: _env_flag("VERIFY_CONTACT_PAYMENTS"))

    # Allowed roles per privileged operation
    access_policy: Dict[str, List[str]] = Field(default_factory=_access_policy_default)

    @property
    def allow_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
