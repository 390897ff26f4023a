import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # API settings
    app_name: str = os.getenv("APP_NAME", "Book Tracker API")
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("PORT", os.getenv("API_PORT", "3000")))

    # Storage
    books_file: str = os.getenv("BOOKS_FILE", "books.json")

    # Static assets served at / when the directory exists
    static_dir: str = os.getenv("STATIC_DIR", "public")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
