import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class Settings:

    def __init__(self) -> None:
        self.mongo_url: str = os.getenv("MONGO_URL", "mongodb://localhost:27017")
        self.mongo_db_name: str = os.getenv("MONGO_DB_NAME", "chatline")

        self.jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
        self.jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")

        self.cloudinary_cloud_name: Optional[str] = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.cloudinary_api_key: Optional[str] = os.getenv("CLOUDINARY_API_KEY")
        self.cloudinary_api_secret: Optional[str] = os.getenv("CLOUDINARY_API_SECRET")
        self.cloudinary_folder: Optional[str] = os.getenv("CLOUDINARY_FOLDER")

        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def uploads_enabled(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)


@lru_cache
def get_settings() -> Settings:
    return Settings()
