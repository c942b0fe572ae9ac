"""
Configuration management for the panel server.
Supports environment variables and a .env file.
"""
import os
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", 3000))
    reload: bool = False
    cors_origin: str = os.getenv("CORS_ORIGIN", "*")

    # Vendor cloud
    govee_api_key: Optional[str] = os.getenv("GOVEE_API_KEY", None)
    govee_api_base: str = os.getenv("GOVEE_API_BASE", "https://openapi.api.govee.com/router/api/v1")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", 10.0))

    # "int" packs RGB into one 24-bit integer, "rgb" sends {r, g, b}
    color_encoding: str = os.getenv("COLOR_ENCODING", "int")

    # Attach the first (flat) attempt to the response when the fallback ran
    include_first_attempt: bool = os.getenv("INCLUDE_FIRST_ATTEMPT", "true").lower() in ("true", "1", "yes")
    debug_routes: bool = os.getenv("DEBUG_ROUTES", "false").lower() in ("true", "1", "yes")

    # Session gate
    auth_enabled: bool = os.getenv("AUTH_ENABLED", "true").lower() in ("true", "1", "yes")
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: Optional[str] = os.getenv("ADMIN_PASSWORD", None)
    session_secret: str = os.getenv("SESSION_SECRET", "change-me")
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "panel_session")
    session_timeout_minutes: int = int(os.getenv("SESSION_TIMEOUT_MINUTES", 60 * 24))

    # Static single-page app
    static_dir: str = os.getenv("STATIC_DIR", "public")

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
