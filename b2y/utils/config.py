"""Runtime configuration read from environment variables."""

import os
from typing import Optional


def env_flag(name: str, default: str = "false") -> bool:
    """Read a true/false environment variable."""
    return os.environ.get(name, default).strip().lower() == "true"


class AppConfig:
    """Application settings.

    Values are read on every access so serverless cold starts and tests
    both see the current environment.
    """

    DEFAULT_IMAGES_BUCKET = "listing-images"
    DEFAULT_LLM_PROVIDER = "anthropic"
    DEFAULT_LLM_MODEL = "claude-sonnet-4-20250514"

    @classmethod
    def env(cls, name: str, default: Optional[str] = None) -> Optional[str]:
        return os.environ.get(name, default)

    @classmethod
    def supabase_url(cls) -> Optional[str]:
        return os.environ.get("SUPABASE_URL")

    @classmethod
    def supabase_service_key(cls) -> Optional[str]:
        return os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

    @classmethod
    def supabase_anon_key(cls) -> Optional[str]:
        """Key for auth and realtime clients, falls back to the service key."""
        return os.environ.get("SUPABASE_ANON_KEY") or cls.supabase_service_key()

    @classmethod
    def images_bucket(cls) -> str:
        return os.environ.get("LISTING_IMAGES_BUCKET", cls.DEFAULT_IMAGES_BUCKET)

    @classmethod
    def use_llm_description(cls) -> bool:
        return env_flag("USE_LLM_DESCRIPTION", "false")

    @classmethod
    def llm_provider(cls) -> str:
        return os.environ.get("LLM_PROVIDER", cls.DEFAULT_LLM_PROVIDER).lower()

    @classmethod
    def llm_model(cls) -> str:
        return os.environ.get("LLM_MODEL", cls.DEFAULT_LLM_MODEL)
