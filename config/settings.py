from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load .env file into os.environ BEFORE pydantic reads it
load_dotenv()


class Settings(BaseSettings):
    # Database (sqlite for local development, postgresql:// in deployments)
    DATABASE_URL: str = "sqlite:///./sandbox.db"

    # Sandbox lifecycle
    # Create sandbox orgs at startup for every user that does not have one yet
    SANDBOX_RETROACTIVE: bool = False
    # Drop the "sandbox" key from the user's custom data once the sandbox is reclaimed
    SANDBOX_CLEAR_USER_LINK: bool = True

    # API server
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # ignore unknown env vars instead of raising errors
    )


settings = Settings()
