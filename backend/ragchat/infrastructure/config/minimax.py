"""Explicit configuration handed to the MiniMax API clients."""

from dataclasses import dataclass
from typing import Optional

from .settings import Settings, get_settings


@dataclass(frozen=True)
class MiniMaxConfig:
    """Credentials and request defaults for one MiniMax account.

    Clients receive this at construction instead of reading the process
    environment, so tests can build them with fake credentials.
    """

    group_id: str
    api_key: str
    base_url: str = "https://api.minimax.chat/v1"
    chat_model: str = "abab6.5s-chat"
    embedding_model: str = "embo-01"
    tokens_to_generate: int = 2048
    temperature: float = 0.01
    top_p: float = 0.95
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MiniMaxConfig":
        """Build the config from application settings."""
        settings = settings or get_settings()
        return cls(
            group_id=settings.MINIMAX_GROUP_ID,
            api_key=settings.MINIMAX_API_KEY,
            base_url=settings.MINIMAX_BASE_URL.rstrip("/"),
            chat_model=settings.MINIMAX_CHAT_MODEL,
            embedding_model=settings.MINIMAX_EMBEDDING_MODEL,
            tokens_to_generate=settings.MINIMAX_TOKENS_TO_GENERATE,
            temperature=settings.MINIMAX_TEMPERATURE,
            top_p=settings.MINIMAX_TOP_P,
            timeout=settings.MINIMAX_TIMEOUT,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
