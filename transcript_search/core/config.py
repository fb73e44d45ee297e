from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"

    # OpenAI (auxiliary model + embeddings)
    openai_api_key: str | None = None
    openai_timeout_seconds: float = 30.0  # Per-request timeout; the engine never retries
    # Small model used for scope classification and query expansion
    utility_model: str = "gpt-5-nano"
    utility_reasoning_effort: str | None = "low"  # Set to None for non-reasoning models
    classifier_max_tokens: int = 256
    expander_max_tokens: int = 1024

    # Embeddings
    embedding_provider: str = "openai"  # "openai" or "sentence_transformers"
    embedding_model: str = "text-embedding-3-small"
    sentence_transformer_model: str = "all-MiniLM-L6-v2"

    # ChromaDB settings
    chromadb_persist_directory: str | None = None  # Auto-detected if None
    chromadb_collection: str = "transcripts"

    # Wording used inside the auxiliary prompts to describe the corpus
    library_description: str = "a library of sermon transcripts"

    # Indexing
    transcripts_dir: str = "data/sermons"
    chunk_size_words: int = 500
    chunk_overlap_words: int = 50
    embedding_batch_size: int = 100
    upsert_batch_size: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"  # Ignore extra environment variables that aren't in the Settings class


settings = Settings()
