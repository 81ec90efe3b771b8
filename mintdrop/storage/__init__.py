from mintdrop.models import RebuildConfig
from mintdrop.storage.base import ArtifactStore
from mintdrop.storage.blob import BlobStore
from mintdrop.storage.local import LocalStore


def stores_from_config(config: RebuildConfig) -> list[ArtifactStore]:
    """Local first, then remote. Either can be switched off in the config."""
    stores: list[ArtifactStore] = []
    if config.local_path:
        stores.append(LocalStore(config.local_path))
    if config.blob_token is not None:
        stores.append(
            BlobStore(
                token=config.blob_token.get_secret_value(),
                key=config.blob_key,
                api_url=config.blob_api_url,
                public_url=config.claims_url,
            )
        )
    return stores
