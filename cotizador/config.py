from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./cotizador.db"
    COMPANY_NAME: str = "Cotizador"
    CURRENCY_SYMBOL: str = "$"
    LOG_LEVEL: str = "INFO"
    # Unicode TTF for PDFs; without it the built-in latin-1 font is used
    PDF_FONT_PATH: Optional[str] = None

    # Auth
    JWT_SECRET: str = ""  # required; auth fails with 500 while empty
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 15
    JWT_REFRESH_EXPIRE_DAYS: int = 30

    # Optional first-run admin. Both must be set; nothing is created otherwise.
    BOOTSTRAP_ADMIN_EMAIL: Optional[str] = None
    BOOTSTRAP_ADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"


settings = Settings()
