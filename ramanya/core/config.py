"""
Relay configuration.
Environment is read once into module constants; RelayConfig carries them to each component.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env from the working directory if present
load_dotenv()

# Store configuration
DB_PATH = os.getenv("DB_PATH", "./data/ramanya.db")
STORE_BACKEND = os.getenv("STORE_BACKEND", "sqlite")  # sqlite|memory

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers|ollama
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "paraphrase-multilingual-mpnet-base-v2")
EMBED_DIMENSION = int(os.getenv("EMBED_DIMENSION", "384"))  # hash provider only

# Retrieval configuration
RAG_ENABLED = os.getenv("RAG_ENABLED", "true").lower() == "true"
RAG_TOP_K = int(os.getenv("RAG_TOP_K", "5"))
RAG_MIN_SCORE = float(os.getenv("RAG_MIN_SCORE", "0.3"))

# Generation configuration - ordered, first entry is tried first
TRANSLATION_MODELS = os.getenv("TRANSLATION_MODELS", "gemma3:27b,gemma3:12b")
GENERATOR_PROVIDER = os.getenv("GENERATOR_PROVIDER", "ollama")  # ollama|mock
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.2"))

# Admin endpoints (approve, reject, reindex) require this bearer token when set
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN")

# Version string
VERSION = "0.3.0"


def parse_model_list(raw: str) -> List[str]:
    """Split a comma separated model list, keeping order and dropping blanks."""
    return [m.strip() for m in (raw or "").split(",") if m.strip()]


@dataclass
class RelayConfig:
    """Explicit configuration object, built once at process start."""
    db_path: str = DB_PATH
    store_backend: str = STORE_BACKEND
    embed_provider: str = EMBED_PROVIDER
    embed_model_name: str = EMBED_MODEL_NAME
    embed_dimension: int = EMBED_DIMENSION
    rag_enabled: bool = RAG_ENABLED
    top_k: int = RAG_TOP_K
    min_score: float = RAG_MIN_SCORE
    model_ids: List[str] = field(default_factory=lambda: parse_model_list(TRANSLATION_MODELS))
    generator_provider: str = GENERATOR_PROVIDER
    ollama_host: str = OLLAMA_HOST
    temperature: float = GENERATION_TEMPERATURE
    admin_token: Optional[str] = ADMIN_TOKEN
    debug: bool = DEBUG
    version: str = VERSION

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Build a config from the current environment (re-reads os.environ)."""
        return cls(
            db_path=os.getenv("DB_PATH", DB_PATH),
            store_backend=os.getenv("STORE_BACKEND", STORE_BACKEND),
            embed_provider=os.getenv("EMBED_PROVIDER", EMBED_PROVIDER),
            embed_model_name=os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME),
            embed_dimension=int(os.getenv("EMBED_DIMENSION", str(EMBED_DIMENSION))),
            rag_enabled=os.getenv("RAG_ENABLED", str(RAG_ENABLED)).lower() == "true",
            top_k=int(os.getenv("RAG_TOP_K", str(RAG_TOP_K))),
            min_score=float(os.getenv("RAG_MIN_SCORE", str(RAG_MIN_SCORE))),
            model_ids=parse_model_list(os.getenv("TRANSLATION_MODELS", TRANSLATION_MODELS)),
            generator_provider=os.getenv("GENERATOR_PROVIDER", GENERATOR_PROVIDER),
            ollama_host=os.getenv("OLLAMA_HOST", OLLAMA_HOST),
            temperature=float(os.getenv("GENERATION_TEMPERATURE", str(GENERATION_TEMPERATURE))),
            admin_token=os.getenv("ADMIN_TOKEN", ADMIN_TOKEN),
            debug=os.getenv("DEBUG", str(DEBUG)).lower() == "true",
        )


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or DB_PATH).parent.mkdir(parents=True, exist_ok=True)
