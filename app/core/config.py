from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Brew & Co. API"
    DATABASE_URL: str = "sqlite:///./cafe_app.db"
    SECRET_KEY: str = "supersecretkey_change_me_in_production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # Signed cookie session holding the cart and the logged-in user id
    SESSION_SECRET: str = "secret"
    SESSION_MAX_AGE: int = 60 * 60  # 1 hour

    LOG_LEVEL: str = "INFO"

    # Seconds the SQLite driver waits on a locked database before failing
    DB_LOCK_TIMEOUT: float = 15.0

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
