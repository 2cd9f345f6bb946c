from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Pool economics
    POOL_FEE_RATE: float = Field(default=0.03, ge=0.0, lt=1.0)
    # Conservation checks balance within 1 cent
    CONSERVATION_TOLERANCE: float = Field(default=0.01, gt=0.0)
    # Offset for the synthetic under/over levels of numeric pools
    LEVEL_TICK_SIZE: int = Field(default=1, gt=0)
    PRO_FORMA_APPLY_FEES: bool = True

    # Invariant handling
    STRICT_INVARIANTS: bool = True  # False: zero-distance winners are logged and skipped
    CHECK_CONSERVATION: bool = True

    # Accounts (opaque identifiers supplied by the account collaborator)
    POOL_ACCOUNT: str = "Pool_Account_Address"
    POOL_MANAGER_ACCOUNT: str = "Pool_Manager_Address"

    # App
    APP_NAME: str = "Parimutuel Pool Engine"
    DEBUG: bool = False


settings = Settings()
