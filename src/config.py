from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class EndpointDescriptor(BaseModel):
    url: str
    body: Literal["json", "multipart"] = "json"


class GenerationParameters(BaseModel):
    prompt: str = (
        "professional product photography, studio lighting, clean white background, "
        "high quality, commercial photography, product on white background, "
        "professional studio setup"
    )
    strength: float = 0.6
    num_inference_steps: int = 30
    guidance_scale: float = 7.5


DEFAULT_FAL_ENDPOINTS = [
    EndpointDescriptor(url="https://fal.run/fal-ai/wan/v2.2-a14b/image-to-image"),
    EndpointDescriptor(url="https://fal.run/fal-ai/flux-pro/image-to-image"),
    EndpointDescriptor(url="https://queue.fal.run/fal-ai/wan/v2.2-a14b/image-to-image"),
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_nested_delimiter="__")

    app_name: str = "studio-background-service"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    cors_origins: list[str] = ["*"]

    fal_api_key: str | None = None
    fal_endpoints: list[EndpointDescriptor] = DEFAULT_FAL_ENDPOINTS
    fal_timeout: float = 120.0
    generation: GenerationParameters = GenerationParameters()


settings = Settings()
