import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mintdrop.models import ProofsPayload
from mintdrop.storage.base import ArtifactStore

logger = logging.getLogger(__name__)


@dataclass
class LocalStore(ArtifactStore):
    path: str
    name: str = "local"

    # create the directory for the artifact if it doesn't exist
    def _create_dir(self) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)

    def read(self) -> Optional[ProofsPayload]:
        if not Path(self.path).exists():
            return None
        return ProofsPayload.model_validate_json(Path(self.path).read_text())

    def write(self, payload: ProofsPayload) -> str:
        """
        Written to a sibling temp file then renamed over the artifact,
        so a reader sees either the old artifact or the new one, never a partial file.
        """
        self._create_dir()
        target = Path(self.path)
        tmp: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", dir=target.parent, prefix=f".{target.name}.", delete=False
            ) as f:
                tmp = Path(f.name)
                f.write(payload.to_json())
            # served to claimants, mkstemp creates it owner-only
            tmp.chmod(0o644)
            tmp.replace(target)
        except OSError:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise
        logger.info("wrote round %s to %s", payload.round, self.path)
        return str(target.resolve())
