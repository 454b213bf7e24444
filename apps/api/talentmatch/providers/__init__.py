from .chat import ChatProvider, ChatRateLimitError, ChatServiceError, get_chat_provider
from .embedding import (
    EmbeddingDimensionError,
    EmbeddingProvider,
    EmbeddingServiceError,
    get_embedding_provider,
)

__all__ = [
    "ChatProvider",
    "ChatServiceError",
    "ChatRateLimitError",
    "get_chat_provider",
    "EmbeddingProvider",
    "EmbeddingServiceError",
    "EmbeddingDimensionError",
    "get_embedding_provider",
]
