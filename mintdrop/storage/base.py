from abc import ABC, abstractmethod
from typing import Optional

from mintdrop.models import ProofsPayload


class ArtifactStore(ABC):
    """A destination the claims artifact is published to"""

    name: str

    @abstractmethod
    def read(self) -> Optional[ProofsPayload]:
        """The artifact currently published here, None if there is none yet"""

    @abstractmethod
    def write(self, payload: ProofsPayload) -> str:
        """Publish `payload`, returning where it landed"""
