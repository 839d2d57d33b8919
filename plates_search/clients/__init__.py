from plates_search.clients.gemini import ConfigurationError, GeminiClient, GenerationError
from plates_search.clients.google_search import GoogleSearchClient

__all__ = ["ConfigurationError", "GeminiClient", "GenerationError", "GoogleSearchClient"]
