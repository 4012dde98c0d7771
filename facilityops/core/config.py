# facilityops/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "FacilityOps API")

    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "facilityops-dev")
    FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "firebase-service-account.json",
    )

    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")
    )
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # A freshly onboarded manager account is reported with its generated
    # credentials only while it is younger than this window.
    NEW_ACCOUNT_WINDOW_SECONDS: int = int(os.getenv("NEW_ACCOUNT_WINDOW_SECONDS", "5"))

    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Timezone for "today" on QR scans (default UTC+5:30)
    # Set via environment variable: TZ_OFFSET=8 for UTC+8, etc.
    TZ_OFFSET: float = float(os.getenv("TZ_OFFSET", "5.5"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]


settings = Settings()
