"""
Canvas style persistence.

One flat JSON document per post (camelCase keys, see models.STYLE_KEYS).
Stores raise PersistenceFailure for anything that prevents a durable save
or a clean read.
"""
import os
import json
import logging
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class PersistenceFailure(Exception):
    def __init__(self, message: str, post_id: Optional[str] = None):
        self.post_id = post_id
        super().__init__(message)


class StyleStore(ABC):

    @abstractmethod
    def load(self, post_id: str) -> Optional[dict]:
        """Persisted document, or None when the post has no style yet."""
        pass

    @abstractmethod
    def save(self, post_id: str, doc: dict) -> None:
        pass


class InMemoryStyleStore(StyleStore):
    def __init__(self):
        self._docs: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def load(self, post_id):
        with self._lock:
            doc = self._docs.get(str(post_id))
            return dict(doc) if doc is not None else None

    def save(self, post_id, doc):
        with self._lock:
            self._docs[str(post_id)] = dict(doc)


class LocalStyleStore(StyleStore):
    """JSON files under base_dir, written atomically (temp file + rename)."""

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, post_id) -> str:
        name = secure_filename(str(post_id))
        if not name:
            raise PersistenceFailure(f"Invalid post id '{post_id}'", post_id=post_id)
        return os.path.join(self.base_dir, f"{name}.json")

    def load(self, post_id):
        path = self._path(post_id)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Canvas style read failed for post {post_id}: {e}")
            raise PersistenceFailure(f"Could not read canvas style: {e}", post_id=post_id)
        if not isinstance(doc, dict):
            raise PersistenceFailure("Canvas style document is not an object", post_id=post_id)
        return doc

    def save(self, post_id, doc):
        path = self._path(post_id)
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(dir=self.base_dir, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, sort_keys=True)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp and os.path.exists(tmp):
                os.remove(tmp)
            logger.error(f"Canvas style save failed for post {post_id}: {e}")
            raise PersistenceFailure(f"Could not save canvas style: {e}", post_id=post_id)


_store: Optional[StyleStore] = None


def get_style_store() -> StyleStore:
    """Process-wide store selected by STYLE_STORE_BACKEND."""
    global _store
    if _store is None:
        from config import STYLE_STORE_BACKEND, CANVAS_STYLE_DIR
        if STYLE_STORE_BACKEND == "memory":
            _store = InMemoryStyleStore()
        else:
            _store = LocalStyleStore(CANVAS_STYLE_DIR)
        logger.info(f"Canvas style store: {type(_store).__name__}")
    return _store
