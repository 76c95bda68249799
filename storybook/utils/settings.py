import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_ARK_BASE_URL = "https://ark.ap-southeast.bytepluses.com/api/v3/images/generations"


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    story_mode: str = "paged"

    image_provider: str = "seedream"
    ark_api_key: Optional[str] = None
    ark_model: str = "seedream-4-0-250828"
    ark_base_url: str = DEFAULT_ARK_BASE_URL
    gemini_api_key: Optional[str] = None
    gemini_image_model: str = "gemini-2.5-flash-image"

    provider_timeout: float = 120.0
    image_batch_size: int = 2

    images_dir: str = "uploads/images"
    images_url_prefix: str = "/images"

    upload_to_s3: bool = False
    s3_bucket_name: Optional[str] = None
    s3_region: str = "eu-north-1"
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = None

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a .env file if present)"""
        load_dotenv()
        env = os.getenv
        return cls(
            openai_api_key=env("OPENAI_API_KEY"),
            openai_model=env("OPENAI_MODEL", "gpt-4o"),
            story_mode=env("STORY_MODE", "paged").lower(),
            image_provider=env("IMAGE_PROVIDER", "seedream").lower(),
            ark_api_key=env("ARK_API_KEY"),
            ark_model=env("ARK_MODEL", "seedream-4-0-250828"),
            ark_base_url=env("ARK_BASE_URL", DEFAULT_ARK_BASE_URL),
            gemini_api_key=env("GEMINI_API_KEY"),
            gemini_image_model=env("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image"),
            provider_timeout=float(env("PROVIDER_TIMEOUT", "120")),
            image_batch_size=int(env("IMAGE_BATCH_SIZE", "2")),
            images_dir=env("IMAGES_DIR", "uploads/images"),
            images_url_prefix=env("IMAGES_URL_PREFIX", "/images"),
            upload_to_s3=env("UPLOAD_TO_S3", "no").lower() in ("1", "true", "yes"),
            s3_bucket_name=env("S3_BUCKET_NAME"),
            s3_region=env("S3_REGION", "eu-north-1"),
            s3_access_key=env("S3_ACCESS_KEY"),
            s3_secret_key=env("S3_SECRET_KEY"),
            log_level=env("LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in env("CORS_ORIGINS", "*").split(",") if o.strip()],
        )
