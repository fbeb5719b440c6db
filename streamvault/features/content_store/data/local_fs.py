import shutil
import logging
import uuid
from pathlib import Path
from typing import BinaryIO, Tuple
from ..domain.interfaces import IContentStore, IStreamHasher

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


class LocalContentStore(IContentStore):
    """
    Content Store on the local filesystem: {root}/{content_hash}/...
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def asset_dir(self, content_hash: str) -> Path:
        return self.root / content_hash

    def write_upload(self, stream: BinaryIO, content_hash: str, filename: str) -> Path:
        # 1. Create the hash-named directory (reused on a name+size collision)
        target_dir = self.asset_dir(content_hash)
        target_dir.mkdir(parents=True, exist_ok=True)

        # 2. Copy synchronously, chunked so large uploads don't sit in RAM
        destination = target_dir / Path(filename).name
        with open(destination, "wb") as dst:
            shutil.copyfileobj(stream, dst, CHUNK_SIZE)

        logger.info(f"Stored upload {destination} ({destination.stat().st_size} bytes)")
        return destination

    def write_upload_digested(self, stream: BinaryIO, filename: str, hasher: IStreamHasher) -> Tuple[str, Path]:
        self.root.mkdir(parents=True, exist_ok=True)
        staging = self.root / f".staging-{uuid.uuid4().hex}"
        digest = hasher.new()

        # Single pass: every chunk is hashed and written
        try:
            with open(staging, "wb") as dst:
                for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
                    digest.update(chunk)
                    dst.write(chunk)

            content_hash = digest.hexdigest()
            target_dir = self.asset_dir(content_hash)
            target_dir.mkdir(parents=True, exist_ok=True)
            destination = target_dir / Path(filename).name
            staging.replace(destination)
        except OSError:
            staging.unlink(missing_ok=True)
            raise

        logger.info(f"Stored upload {destination} (digest {content_hash[:12]})")
        return content_hash, destination

    def read(self, content_hash: str, name: str) -> bytes:
        return (self.asset_dir(content_hash) / name).read_bytes()

    def exists(self, content_hash: str, name: str) -> bool:
        return (self.asset_dir(content_hash) / name).is_file()

    def remove_asset_dir(self, content_hash: str) -> bool:
        target = self.asset_dir(content_hash)
        try:
            shutil.rmtree(target)
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"Failed to remove asset directory {target}: {e}")
            return False

    def remove_file(self, path: Path) -> bool:
        try:
            Path(path).unlink()
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"Failed to remove file {path}: {e}")
            return False

    def remove_asset_dir_if_empty(self, content_hash: str) -> bool:
        target = self.asset_dir(content_hash)
        try:
            # Another asset with the same hash may still own files here
            if any(target.iterdir()):
                return False
            target.rmdir()
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"Failed to remove empty asset directory {target}: {e}")
            return False
