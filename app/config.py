"""
Runtime configuration loaded through pydantic-settings.

Values come from environment variables (case-insensitive) or a local ``.env``
file. List-valued settings such as ``RESERVED_SUBDOMAINS`` and
``CORS_ORIGINS`` are given as JSON arrays in the environment.
"""

from enum import Enum
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Deployment stage the process runs in"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


# Labels under the main domain that belong to the platform, never to a cook
DEFAULT_RESERVED_SUBDOMAINS = [
    "www",
    "api",
    "admin",
    "app",
    "mail",
    "ftp",
    "smtp",
    "static",
    "assets",
    "cdn",
    "dashboard",
    "support",
    "help",
    "blog",
    "status",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    app_name: str = "DancyMeals"
    app_version: str = "1.0.0"
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    # Database
    database_url: str = Field(
        default="postgresql+psycopg2://dancymeals@localhost:5432/dancymeals",
        description="SQLAlchemy URL; sqlite:// is accepted for local runs and tests",
    )
    db_echo: bool = Field(default=False, description="Log emitted SQL")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Tries at creating the schema during startup"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Pause between schema creation tries"
    )

    # Tenancy
    main_domain: str = Field(
        default="dancymeals.cm",
        description="Platform domain; storefronts live on its subdomains",
    )
    reserved_subdomains: list[str] = Field(
        default=DEFAULT_RESERVED_SUBDOMAINS,
        description="Subdomain labels that never resolve to a storefront",
    )

    # Cookie session carrying cart, checkout progress and login
    session_secret_key: str = Field(
        default="change-me", description="Signing key for the session cookie"
    )
    session_cookie_name: str = "dancymeals_session"
    session_max_age: int = Field(default=14 * 24 * 60 * 60, ge=60)

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"]
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    api_prefix: str = ""
    api_title: str = "DancyMeals API"
    api_description: str = "Multi-tenant storefronts, carts and checkout for home cooks"

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.strip().lower())
        return v

    @field_validator("main_domain", mode="before")
    @classmethod
    def normalize_main_domain(cls, v):
        if isinstance(v, str):
            return v.strip().lower().rstrip(".")
        return v

    @field_validator("reserved_subdomains", mode="before")
    @classmethod
    def normalize_reserved(cls, v):
        """Lower-case entries; a plain string is split on commas"""
        if isinstance(v, str):
            v = v.split(",")
        return [str(part).strip().lower() for part in v if str(part).strip()]

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


settings = Settings()
