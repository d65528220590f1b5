import os
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.engine import URL

class Settings(BaseModel):
    DB_URL: Optional[str] = os.getenv("DB_URL") or None
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "3306"))
    DB_USER: str = os.getenv("DB_USER", "root")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_NAME: str = os.getenv("DB_NAME", "minecraft")
    # connections held open at once; requests beyond this wait for one
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    PORT: int = int(os.getenv("PORT", "10000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def database_url(self):
        if self.DB_URL:
            return self.DB_URL
        return URL.create(
            "mysql+pymysql",
            username=self.DB_USER,
            password=self.DB_PASSWORD or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    @property
    def cors_origins(self):
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
