"""
Printly settings.

Loaded from environment variables with the PRINTLY_ prefix (and an optional
.env file). Build one Settings per process and hand it to the services; nothing
in the package reads configuration from module globals.

Environment variables:
- PRINTLY_DB_URL: SQLAlchemy async URL used by open_database
  (default: sqlite+aiosqlite:///printly.db)
- PRINTLY_STORAGE_BASE_PATH: root directory for LocalBlobStore (default: ./uploads)
- PRINTLY_STORAGE_BASE_URL: public URL prefix for stored files
- PRINTLY_CURRENCY: ISO currency code for new orders (default: EUR)
- PRINTLY_PER_PAGE_RATE: minor currency units per page (default: 10)
- PRINTLY_BYTES_PER_PAGE: byte-size proxy for one page (default: 50000)
- PRINTLY_CODE_LENGTH / PRINTLY_CODE_ALPHABET / PRINTLY_CODE_MAX_ATTEMPTS
- PRINTLY_CODE_UNBIASED: use rejection sampling for pickup codes (default: false)
- PRINTLY_MAX_DOCUMENT_SIZE: upper bound for a document in bytes (default and
  ceiling: 50MB)
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from printly.domain import MAX_DOCUMENT_SIZE
from printly.pickup import CodePolicy, DEFAULT_ALPHABET
from printly.pricing import Rates


class Settings(BaseSettings):
    """Process configuration for the order core."""

    model_config = SettingsConfigDict(
        env_prefix="PRINTLY_",
        env_file=".env",
        extra="ignore",
    )

    db_url: str = "sqlite+aiosqlite:///printly.db"

    storage_base_path: str = "./uploads"
    storage_base_url: str = "http://localhost:8080/files"

    currency: str = Field(default="EUR", min_length=3, max_length=3)
    per_page_rate: int = Field(default=10, ge=0)
    bytes_per_page: int = Field(default=50_000, gt=0)

    code_length: int = Field(default=6, gt=0)
    code_alphabet: str = DEFAULT_ALPHABET
    code_max_attempts: int = Field(default=10, gt=0)
    code_unbiased: bool = False

    # May tighten the document size limit, never widen it.
    max_document_size: int = Field(default=MAX_DOCUMENT_SIZE, gt=0, le=MAX_DOCUMENT_SIZE)

    @field_validator("code_alphabet")
    @classmethod
    def _alphabet_unique(cls, v: str) -> str:
        if len(v) < 2 or len(set(v)) != len(v):
            raise ValueError("code_alphabet needs at least two distinct symbols")
        return v

    @field_validator("currency")
    @classmethod
    def _currency_upper(cls, v: str) -> str:
        return v.upper()

    def code_policy(self) -> CodePolicy:
        return CodePolicy(
            alphabet=self.code_alphabet,
            length=self.code_length,
            max_attempts=self.code_max_attempts,
            unbiased=self.code_unbiased,
        )

    def rates(self) -> Rates:
        return Rates(per_page=self.per_page_rate, bytes_per_page=self.bytes_per_page)


__all__ = ("Settings",)
