"""
Default values for configuration models.
"""

DEFAULT_CHAT_MODEL = "llama3.3:latest"
DEFAULT_EMBEDDING_MODEL = "embeddinggemma:latest"
# Filled in when RAG is switched on with an empty embedding model
RAG_FALLBACK_EMBEDDING_MODEL = "nomic-embed-text:latest"

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_CHROMADB_URL = "http://localhost:8000"
DEFAULT_CHROMADB_DISTANCE = 0.95
DEFAULT_MAX_DOCUMENTS = 5

MIN_CHROMADB_DISTANCE = 0.0
MAX_CHROMADB_DISTANCE = 2.0

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful brief AI assistant. Answer the user's questions directly "
    "and concisely. When context documents are provided, ground your answer in them "
    "and say so when they do not contain the answer."
)

# Cycle order used by the settings panel
LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warn", "error")
DEFAULT_LOG_LEVEL = "info"
