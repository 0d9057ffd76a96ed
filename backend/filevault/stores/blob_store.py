"""Filesystem blob store: a flat directory keyed by opaque storage name"""
import os
from pathlib import Path
from typing import Optional, Union

from filevault.errors import BlobCollision, InfrastructureError
from filevault.utils.logger import logger


class LocalBlobStore:
    """Stores each blob as ``<root>/<storage_name>``.

    Ownership is never encoded in the path; access control lives entirely in
    the metadata layer.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        # Storage names are generated server-side; reject anything path-like anyway
        if not name or os.sep in name or (os.altsep and os.altsep in name) or name in (".", ".."):
            raise InfrastructureError(f"Invalid storage name: {name!r}")
        return self.root / name

    def write(self, name: str, data: bytes) -> None:
        path = self._path(name)
        try:
            # "xb" refuses to overwrite, so a name collision can never clobber a blob
            with open(path, "xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            logger.error(f"Storage name collision: {name}", extra={"action": "write_blob"})
            raise BlobCollision() from exc
        except OSError as exc:
            logger.error(f"Blob write failed: {name}", extra={"action": "write_blob"}, exc_info=True)
            # Do not leave a truncated blob behind
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Could not remove partial blob: {name}", extra={"action": "write_blob"})
            raise InfrastructureError() from exc

    def locate(self, name: str) -> Optional[Path]:
        path = self._path(name)
        return path if path.is_file() else None

    def delete(self, name: str) -> bool:
        path = self._path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise InfrastructureError() from exc
        return True
