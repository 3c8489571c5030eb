from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "allowance-registration"
    environment: str = "local"
    log_level: str = "INFO"

    mongo_host: str = "localhost"
    mongo_db: str = "allowance"
    mongo_password: str | None = None
    mongo_params: str | None = None
    mongo_user: str | None = None

    redis_db: int = 0
    redis_port: int = 6379
    redis_host: str = "localhost"
    redis_password: str | None = None

    # Upstream services; absence is a handled condition, not a startup failure
    firebase_web_api_key: SecretStr | None = None
    sendgrid_api_key: SecretStr | None = None
    http_timeout_seconds: float = 10.0

    confirmation_template_id: str = "d-f9bdc147ca1847b59ff50ea3be406da5"
    confirmation_sender_email: str = "confirmation@allowance.fund"
    confirmation_sender_name: str = "Hoya Allowance"

    default_merchant_id: str = "zzy3wQDdmwXXjzVu4eCx3QRAQ1J3"
    default_merchant_name: str = "Hoya Allowance"
    default_merchant_logo_url: str | None = None
    default_allowance_amount: str = "$0.00"

    check_uniqueness: bool = True
    create_default_allowance: bool = True
    signup_rate_limit_seconds: int = 5

    model_config = SettingsConfigDict(env_file=(".env",), case_sensitive=False)

    @property
    def mongo_uri(self) -> str:
        auth = ""
        if self.mongo_user and self.mongo_password:
            auth = f"{self.mongo_user}:{self.mongo_password}@"
        params = f"?{self.mongo_params}" if self.mongo_params else "?retryWrites=true&w=majority"
        return f"mongodb+srv://{auth}{self.mongo_host}/{self.mongo_db}{params}"


settings = Settings()
