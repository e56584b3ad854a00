import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _load_dotenv() -> None:
    dotenv_path = PROJECT_ROOT / ".env"
    if not dotenv_path.exists():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        os.environ.setdefault(key, value)


class Settings(BaseModel):
    app_name: str = Field(default="VestingLedger")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    database_url: str = Field(default="sqlite:///./vesting.db")
    cors_origins: str = Field(default="*")
    admin_identities: str = Field(default="")

    @property
    def cors_origin_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def admin_identity_list(self) -> list[str]:
        # Identities are addresses; compare them verbatim.
        return [identity.strip() for identity in self.admin_identities.split(",") if identity.strip()]

    def is_admin(self, identity: str) -> bool:
        return identity in self.admin_identity_list

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_dotenv()
        return cls(
            app_name=os.getenv("APP_NAME", "VestingLedger"),
            environment=os.getenv("ENVIRONMENT", "development"),
            debug=os.getenv("DEBUG", "false").lower() in {"1", "true", "yes", "on"},
            database_url=os.getenv("DATABASE_URL", "sqlite:///./vesting.db"),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
            admin_identities=os.getenv("ADMIN_IDENTITIES", ""),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
