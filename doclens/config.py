from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Uploads
    upload_dir: str = "uploads"
    max_upload_size_bytes: int = 20 * 1024 * 1024  # 20MB
    document_extensions: list[str] = [".pdf", ".docx", ".doc"]
    image_extensions: list[str] = [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".webp"]
    analysis_extensions: list[str] = [
        ".txt",
        ".csv",
        ".json",
        ".xml",
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".webp",
    ]
    max_analysis_file_bytes: int = 10 * 1024 * 1024  # 10MB

    @field_validator("document_extensions", "image_extensions", "analysis_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Accept extensions with or without the leading dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
    ]
    cors_allow_all: bool = False  # Development mode: accept any origin

    # OCR service
    ocr_base_url: str = "https://im-test.youjiashuju.com"
    ocr_endpoint: str = "/clas_and_ocr"
    ocr_timeout_seconds: float = 30.0

    # OpenRouter (mounted at /ai)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_default_model: str = "deepseek/deepseek-chat-v3-0324:free"
    openrouter_timeout_seconds: float = 30.0
    app_url: str = "http://localhost:3020"  # Sent as HTTP-Referer to OpenRouter

    # OpenAI-compatible endpoint (mounted at /openai)
    openai_api_key: str = ""
    openai_base_url: str = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    openai_default_model: str = "qwen-vl-max"
    openai_vision_model: str = "qwen-vl-max"
    openai_model_filter: str = ""  # Only list models whose id contains this
    openai_timeout_seconds: float = 60.0

    # Shared generation parameters
    ai_max_tokens: int = 1000
    ai_temperature: float = 0.7

    # Rate limiting (OCR and AI endpoints)
    rate_limit_enabled: bool = False
    rate_limit_storage_uri: str = "memory://"
    rate_limit_external_per_minute: int = 30

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
