from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_ACCESS_TOKEN: str | None = None
    WHATSAPP_GRAPH_API_VERSION: str = "v20.0"
    WHATSAPP_PHONE_NUMBER_ID: str = ""

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_CLASSIFY: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_CLASSIFY: float = 0.0
    OPENAI_TIMEOUT_SECONDS: float = 15.0

    GOOGLE_CALENDAR_ACCESS_TOKEN: str | None = None
    GOOGLE_CALENDAR_BASE_URL: str = "https://www.googleapis.com/calendar/v3"
    OWNER_ATTENDEE_EMAIL: str | None = None

    TENANTS_FILE: str = "./data/tenants.json"
    PENDING_BOOKINGS_DIR: str = "./data/pending_bookings"
    STORE_PROVIDER: str = "json"

    SLOT_GRACE_MINUTES: int = 5
    SLOT_WINDOW_DAYS: int = 3
    SLOT_LIMIT: int = 3


settings = Settings()
