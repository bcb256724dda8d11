"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from two sources, in priority
# order:
#
#   1. **Environment variables** - e.g. OPENAI_API_KEY=sk-abc123
#   2. **.env file** - key=value lines in the project root .env file
#
# Field ``chunk_size`` maps to env var ``CHUNK_SIZE`` (case-insensitive).
# Defaults below apply when neither source defines a value.
#
# Empty provider credentials mean "not configured": main.py skips those
# providers when choosing the LLM and embedding backends.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Legal document service settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === LLM / Embedding Providers ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, vLLM, ...)
    openai_text_model: str = ""
    openai_embedding_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = ""

    # === Chunking ===
    chunk_size: int = 6000
    chunk_overlap: int = 200

    # === Embedding ===
    # Only the first N chunks (document order) are embedded per document.
    max_embedded_chunks: int = 10

    # === Classifier ===
    classifier_char_limit: int = 20000

    # === Timeouts (seconds; 0 disables) ===
    fetch_timeout: float = 30.0
    embedding_timeout: float = 60.0
    llm_timeout: float = 60.0

    # === Storage ===
    document_db_path: str = "data/documents.db"
    file_store_dir: str = "data/files"
    chat_prompt_path: str = ""  # Optional file overriding the built-in chat template
    analysis_prompt_path: str = ""
    party_prompt_path: str = ""

    # === Analysis ===
    # Party extraction only reads the opening of the document.
    party_char_limit: int = 10000

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunking(self) -> "Settings":
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        if self.max_embedded_chunks <= 0:
            raise ValueError("max_embedded_chunks must be positive")
        return self

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have credentials or an endpoint configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
