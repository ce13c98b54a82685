from typing import Dict, List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings class.
    Reads variables from .env file automatically.
    """

    # API Config
    PROJECT_NAME: str = "Production Planning API"
    API_V1_STR: str = "/api"
    PORT: int = 5000

    # MongoDB Config
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "production_planning"

    # Identity provider / token verification
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    TOKEN_AUDIENCE: str | None = None
    TOKEN_ISSUER: str | None = None
    IDENTITY_PROJECT_ID: str | None = None
    IDENTITY_CLIENT_EMAIL: str | None = None
    IDENTITY_PRIVATE_KEY: str | None = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS (comma separated)
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # Workflow identities: role name -> user id that receives work for that role
    ROLE_IDENTITIES: Dict[str, str] = {
        "production_manager": "production-manager",
        "plant_head": "plant-head",
    }

    # Production workflow
    DAYS_PER_WEEK: int = 6
    ACHIEVEMENT_THRESHOLD: float = 85.0
    MONTHLY_PLAN_DEADLINE_DAYS: int = 7

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "Asia/Kolkata"
    MONTHLY_PLAN_CRON: str = "15 16 4 * *"

    # Pydantic V2 Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @property
    def token_audience(self) -> str | None:
        return self.TOKEN_AUDIENCE or self.IDENTITY_PROJECT_ID or None

    @property
    def token_issuer(self) -> str | None:
        return self.TOKEN_ISSUER or self.IDENTITY_CLIENT_EMAIL or None

    @property
    def signing_key(self) -> str:
        # Private keys arrive from .env with escaped newlines
        if self.IDENTITY_PRIVATE_KEY:
            return self.IDENTITY_PRIVATE_KEY.replace("\\n", "\n")
        return self.SECRET_KEY

    @property
    def verification_key(self) -> str:
        # HMAC verifies with the signing secret; asymmetric algorithms with the public key in SECRET_KEY
        if self.ALGORITHM.upper().startswith("HS"):
            return self.signing_key
        return self.SECRET_KEY

    def identity_for(self, role_name: str) -> str:
        try:
            return self.ROLE_IDENTITIES[role_name]
        except KeyError:
            raise ValueError(f"No identity configured for role '{role_name}'") from None

    @model_validator(mode="after")
    def validate_workflow_settings(self):
        if self.DAYS_PER_WEEK not in (6, 7):
            raise ValueError("DAYS_PER_WEEK must be 6 or 7")
        if self.is_production and self.SECRET_KEY == "change-me":
            raise ValueError("Default SECRET_KEY is not allowed in production.")
        return self


# It creates the 'config' object that main.py uses.
config = Settings()
