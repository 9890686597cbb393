"""Application configuration with sensible defaults."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(__file__).parent / "data"  # bundled catalog ships with the package

load_dotenv(BASE_DIR / ".env")

# Together AI (embeddings)
TOGETHER_API_KEY = os.getenv("TOGETHER_API_KEY", "")
TOGETHER_BASE_URL = os.getenv("TOGETHER_BASE_URL", "https://api.together.xyz/v1")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "togethercomputer/m2-bert-80M-8k-retrieval")

# Google Gemini (chat completion)
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
CHAT_MODEL = os.getenv("CHAT_MODEL", "gemini-1.5-pro")
MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))

# Outbound HTTP
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "60.0"))

# Vector index ("pinecone" for the hosted index, "faiss" for a local one)
VECTOR_BACKEND = os.getenv("VECTOR_BACKEND", "pinecone")
PINECONE_API_KEY = os.getenv("PINECONE_API_KEY", "")
PINECONE_INDEX = os.getenv("PINECONE_INDEX", "laptops")
PINECONE_NAMESPACE = os.getenv("PINECONE_NAMESPACE", "")

# RAG parameters
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "10"))
QUERY_HISTORY_PROMPTS = int(os.getenv("QUERY_HISTORY_PROMPTS", "1"))  # past user turns merged into the query
HISTORY_MAX_TURNS = int(os.getenv("HISTORY_MAX_TURNS", "10"))

# Catalog seeding
CATALOG_PATH = Path(os.getenv("CATALOG_PATH", str(DATA_DIR / "laptops.json")))
SEED_BATCH_SIZE = int(os.getenv("SEED_BATCH_SIZE", "20"))
SEED_BATCH_DELAY = float(os.getenv("SEED_BATCH_DELAY", "0.5"))  # seconds, rate-limit spacing

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
