from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "EduTrack"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: str = "5432"
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None

    DATABASE_URL: str = "sqlite:///./edutrack.db"
    TEST_DATABASE_URL: Optional[str] = None

    def __init__(self, **data):
        super().__init__(**data)
        if self.DATABASE_HOST:
            self.DATABASE_URL = (
                f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
            )

    # Clerk identity provider
    CLERK_SECRET_KEY: Optional[str] = None
    CLERK_API_URL: str = "https://api.clerk.com/v1"
    CLERK_TIMEOUT_SECONDS: float = 10.0
    # PEM public key (RS256) used to verify session tokens
    CLERK_JWT_KEY: Optional[str] = None
    CLERK_JWT_ALGORITHM: str = "RS256"
    # whsec_... signing secret of the Clerk webhook endpoint
    CLERK_WEBHOOK_SECRET: Optional[str] = None

    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"

settings = Settings()
