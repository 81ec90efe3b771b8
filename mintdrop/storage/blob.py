import logging
from dataclasses import dataclass
from typing import Optional

import requests

from mintdrop.models import ProofsPayload
from mintdrop.storage.base import ArtifactStore

logger = logging.getLogger(__name__)


@dataclass
class BlobStore(ArtifactStore):
    """
    Remote artifact on a Vercel-Blob style store.
    :param `token`: read/write token, sent as a bearer token
    :param `key`: pathname of the artifact inside the store
    :param `public_url`: where clients fetch the artifact, used to read back what is live.
        Without one the artifact is read from its pathname in the store, with the token.
    """

    token: str
    key: str = "claims/current.json"
    api_url: str = "https://blob.vercel-storage.com"
    public_url: Optional[str] = None
    timeout: int = 30
    name: str = "blob"

    @property
    def put_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.key.lstrip('/')}"

    def read(self) -> Optional[ProofsPayload]:
        headers = {"cache-control": "no-store"}
        if not self.public_url:
            headers["authorization"] = f"Bearer {self.token}"
        res = requests.get(
            self.public_url or self.put_url, headers=headers, timeout=self.timeout
        )
        if res.status_code == 404:
            return None
        res.raise_for_status()
        return ProofsPayload.model_validate(res.json())

    def write(self, payload: ProofsPayload) -> str:
        res = requests.put(
            self.put_url,
            data=payload.to_json().encode(),
            headers={
                "authorization": f"Bearer {self.token}",
                "x-content-type": "application/json",
                "x-add-random-suffix": "0",
                "x-allow-overwrite": "1",
            },
            timeout=self.timeout,
        )
        res.raise_for_status()
        url = res.json().get("url") or self.public_url or self.put_url
        logger.info("uploaded round %s to %s", payload.round, url)
        return url
