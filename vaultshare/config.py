from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Session settings
    session_secret: str = "your-super-secret-session-key-change-in-production"

    # Storage settings
    local_kv_store_path: str = "data/kv_store.json"

    # Refuse to save when another collaborator saved since this session loaded
    use_fingerprint: bool = False

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
