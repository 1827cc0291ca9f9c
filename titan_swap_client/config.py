from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="TITAN_", extra="allow")

    # Titan API
    auth_token: str | None = None
    base_url: str | None = None  # falls back to the production endpoint
    timeout_sec: float = 15.0

    # Example runner
    user_pubkey: str | None = None
    private_key: str | None = None  # base58 secret key
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    send_tx: bool = False

    # Logging
    log_level: str = "INFO"

    # --- Validators to coerce empty strings in optional envs to None ---
    @field_validator("auth_token", "base_url", "user_pubkey", "private_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, v):
        if v == "":
            return None
        return v
