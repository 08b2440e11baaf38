from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings


DEFAULT_CRM_FIELD_MAPPING: dict[str, str] = {
    "first_name": "first_name",
    "last_name": "last_name",
    "phone": "phone",
    "business_name": "business_name",
    "business_address": "business_address",
    "business_city": "business_city",
    "business_state": "business_state",
    "business_zip": "business_zip",
    "years_in_business": "years_in_business",
    "loan_type": "loan_type",
    "amount_requested": "amount_requested",
    "application_number": "application_number",
    "status": "status",
}


class CrmSyncConfig(BaseModel):
    """Downstream CRM sync settings, handed to the application processor explicitly."""

    auto_sync: bool = False
    api_endpoint: Optional[str] = None
    webhook_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: float = 10.0
    field_mapping: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CRM_FIELD_MAPPING))

    model_config = {"frozen": True}

    @property
    def endpoint(self) -> Optional[str]:
        return self.webhook_url or self.api_endpoint

    @property
    def enabled(self) -> bool:
        return self.auto_sync and bool(self.endpoint)


class Settings(BaseSettings):
    app_name: str = "Business Loan Origination API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_origination.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    crm_auto_sync: bool = False
    crm_api_endpoint: Optional[str] = None
    crm_webhook_url: Optional[str] = None
    crm_api_key: Optional[str] = None
    crm_timeout_seconds: float = 10.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)
    _is_postgresql: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)
        object.__setattr__(self, "_is_postgresql", "postgresql" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def is_postgresql(self) -> bool:
        return self._is_postgresql

    def crm_sync_config(self) -> CrmSyncConfig:
        return CrmSyncConfig(
            auto_sync=self.crm_auto_sync,
            api_endpoint=self.crm_api_endpoint,
            webhook_url=self.crm_webhook_url,
            api_key=self.crm_api_key,
            timeout_seconds=self.crm_timeout_seconds,
        )


settings = Settings()
