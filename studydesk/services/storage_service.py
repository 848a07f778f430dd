# studydesk/services/storage_service.py
import logging
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from threading import Lock
from typing import Iterable, Optional

from werkzeug.utils import secure_filename

from ..errors import ValidationError

log = logging.getLogger(__name__)


def _remove_file(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        log.info("reclaim: %s already absent", path)
        return False
    except OSError as e:
        log.warning("reclaim: could not delete %s: %s", path, e)
        return False
    log.info("reclaim: deleted %s", path)
    return True


class Reclaimer:
    """Background queue deleting uploaded files nobody references any more.

    Submissions return immediately; callers never wait on the outcome.
    ``wait()`` exists for shutdown and tests.
    """

    def __init__(self, max_workers: int = 1):
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="reclaim")
        self._pending: set[Future] = set()
        self._lock = Lock()

    def submit(self, path: Path) -> Future:
        fut = self._executor.submit(_remove_file, path)
        with self._lock:
            self._pending.add(fut)
        fut.add_done_callback(self._forget)
        return fut

    def _forget(self, fut: Future):
        with self._lock:
            self._pending.discard(fut)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until queued deletions finish. Returns False on timeout."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self):
        self._executor.shutdown(wait=True)


class UploadStore:
    """Stores uploads under ``root`` and hands out public ``/uploads/...`` paths."""

    def __init__(
        self,
        root,
        reclaimer: Reclaimer,
        url_prefix: str = "/uploads",
        allowed_extensions: Optional[Iterable[str]] = None,
        image_extensions: Optional[Iterable[str]] = None,
    ):
        self.root = Path(root)
        self.reclaimer = reclaimer
        self.url_prefix = "/" + url_prefix.strip("/")
        self.allowed_extensions = set(allowed_extensions or ())
        self.image_extensions = set(image_extensions or ())

    def _ensure_base(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def allowed_ext(self, filename: str, image: bool = False) -> bool:
        exts = self.image_extensions if image else self.allowed_extensions
        if not exts:
            return True
        suffix = Path(filename).suffix.lower().lstrip(".")
        return bool(suffix) and suffix in exts

    def store(self, file_storage, image: bool = False) -> str:
        """
        Saves the upload as <millis>-<random>-<safe_name> and returns its public path.
        The generated name is unique per call, so nothing is ever overwritten.
        """
        safe_name = secure_filename(file_storage.filename or "")
        if not safe_name:
            raise ValidationError("Uploaded file has no usable name.")
        if not self.allowed_ext(safe_name, image=image):
            raise ValidationError(f"Unsupported file type: {safe_name}")

        base = self._ensure_base()
        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"
        file_storage.save(base / stored_name)
        log.info("stored upload %s", stored_name)
        return f"{self.url_prefix}/{stored_name}"

    def resolve(self, stored_path: str) -> Optional[Path]:
        """Maps a public path back to a file inside the root, or None if it points elsewhere."""
        prefix = self.url_prefix + "/"
        if not stored_path or not stored_path.startswith(prefix):
            return None
        base = self.root.resolve()
        target = (base / stored_path[len(prefix):]).resolve()
        if base not in target.parents:
            return None
        return target

    def reclaim(self, stored_path: Optional[str]) -> Optional[Future]:
        if not stored_path:
            return None
        target = self.resolve(stored_path)
        if target is None:
            log.warning("reclaim: refusing path outside upload root: %r", stored_path)
            return None
        return self.reclaimer.submit(target)
