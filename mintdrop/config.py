from pathlib import Path
from typing import Optional

from mintdrop.env import env_var, optional_env_var
from mintdrop.errors import BadConfigException, MissingEnvironmentVariableException
from mintdrop.models import RebuildConfig, to_signer


def _flag(value: Optional[str]) -> bool:
    return value not in (None, "", "0", "false", "False")


def _int_env(accessor: str, default: int) -> int:
    value = optional_env_var(accessor, default=str(default))
    try:
        return int(value)  # type: ignore
    except ValueError:
        raise BadConfigException(f"{accessor} must be an integer, got {value!r}")


def load_config_from_env() -> RebuildConfig:
    """
    Builds the config from the environment (and `.env`, loaded by `mintdrop.env`).
    Missing contract addresses or RPC raise before anything touches the chain.
    """
    rpc_url = optional_env_var("RPC_URL", "SEPOLIA_RPC_URL")
    if not rpc_url:
        raise MissingEnvironmentVariableException("RPC_URL")

    write_local = _flag(optional_env_var("WRITE_LOCAL", default="1"))

    return RebuildConfig(
        rpc_url=rpc_url,
        nft_address=env_var("NFT_ADDRESS"),
        distributor_address=env_var("DISTRIBUTOR_ADDRESS"),
        blocks_per_window=_int_env("BLOCKS_PER_HOUR", 300),
        max_block_range=_int_env("MAX_BLOCK_RANGE", 500),
        scan_retries=_int_env("SCAN_RETRIES", 2),
        round_seconds=_int_env("ROUND_SECONDS", 3600),
        reward_amount=optional_env_var("REWARD_AMOUNT", default="5"),
        reward_decimals=_int_env("REWARD_DECIMALS", 18),
        signer=to_signer(optional_env_var("PRIVATE_KEY")),
        local_path=(
            optional_env_var("CLAIMS_PATH", default="public/claims/current.json")
            if write_local
            else None
        ),
        blob_token=optional_env_var("BLOB_READ_WRITE_TOKEN"),
        blob_key=optional_env_var("BLOB_KEY", default="claims/current.json"),
        blob_api_url=optional_env_var(
            "BLOB_API_URL", default="https://blob.vercel-storage.com"
        ),
        claims_url=optional_env_var("CLAIMS_URL"),
        receipt_timeout=_int_env("RECEIPT_TIMEOUT", 120),
    )


def load_conf(path: str) -> RebuildConfig:
    """Loads an existing config from a json file"""
    return RebuildConfig.model_validate_json(Path(path).read_text())
