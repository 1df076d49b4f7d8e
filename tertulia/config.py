from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Shown in the page context and the OpenAPI title
    APP_NAME: str = "tertulia"

    # When False, new accounts need an invitation token (the very first
    # account is always allowed so the deployment can be bootstrapped).
    REGISTRATION_OPEN: bool = True
    INVITATION_EXPIRE_HOURS: int = 24 * 7

    # Reactions
    MAX_DISTINCT_REACTIONS: int = 10  # distinct emoji per post/comment
    REACTIONS_PAGE_SIZE: int = 20  # reactors per page
    EMOJI_MAX_LENGTH: int = 20

    FEED_PAGE_SIZE: int = 20
    REPORTS_PAGE_SIZE: int = 20
    SEARCH_LIMIT: int = 20

    model_config = {"env_file": ".env"}


settings = Settings()
