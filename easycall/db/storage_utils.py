# easycall/db/storage_utils.py
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from easycall.core.config import settings
from easycall.core.exceptions import StorageError

# --- 存储键 (与设备端 UserDefaults 的键保持一致) ---
USER_CONTACTS_KEY = "userContacts"
SWIPE_HINT_SEEN_KEY = "hasSeenSwipeHint"
DATA_VERSION_KEY = "contactsDataVersion"
CURRENT_REGION_KEY = "currentRegion"
APP_MODE_KEY = "appMode"


class MemoryStorage:
    """In-process key-value storage. Used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        # 与文件存储保持一致: 只接受可JSON序列化的值
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON serializable: {e}") from e
        with self._lock:
            self._data[key] = json.loads(encoded)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return json.loads(json.dumps(self._data))

    def close(self) -> None:
        pass


class JsonFileStorage(MemoryStorage):
    """
    整个存储是一个JSON文档。每次写入都先写临时文件再 os.replace，
    所以磁盘上的文件要么是旧版本要么是新版本，不会出现半写状态。
    写入在锁内串行执行，按调用顺序落盘 (后写覆盖先写)。
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._read_document())

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            # 损坏的文件按空存储处理，下次写入时会被覆盖
            print(f"[STORAGE WARN] Could not read {self.path}, starting empty: {e}")
            return {}
        if not isinstance(document, dict):
            print(f"[STORAGE WARN] Unexpected document type in {self.path}, starting empty.")
            return {}
        return document

    def _write_document(self, document: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".easycall-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def set(self, key: str, value: Any) -> None:
        try:
            encoded = json.loads(json.dumps(value))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON serializable: {e}") from e
        with self._lock:
            document = dict(self._data)
            document[key] = encoded
            try:
                self._write_document(document)
            except OSError as e:
                raise StorageError(f"Failed to write {self.path}: {e}") from e
            self._data = document

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            document = {k: v for k, v in self._data.items() if k != key}
            try:
                self._write_document(document)
            except OSError as e:
                raise StorageError(f"Failed to write {self.path}: {e}") from e
            self._data = document


class StorageManager:
    storage: Optional[MemoryStorage] = None

storage_manager = StorageManager()

def connect_to_storage(path: Optional[Union[str, Path]] = None) -> MemoryStorage:
    storage_path = Path(path) if path else settings.STORAGE_PATH
    print(f"Opening local storage at {storage_path}...")
    storage_manager.storage = JsonFileStorage(storage_path)
    print("Local storage ready.")
    return storage_manager.storage

def use_storage(storage: MemoryStorage) -> MemoryStorage:
    """Installs an already-built storage (e.g. MemoryStorage) as the active one."""
    storage_manager.storage = storage
    return storage

def close_storage():
    if storage_manager.storage:
        print("Closing local storage...")
        storage_manager.storage.close()
        storage_manager.storage = None
        print("Local storage closed.")

def get_storage() -> MemoryStorage:
    if storage_manager.storage is None:
        raise RuntimeError("Storage not opened. Call connect_to_storage first during app startup.")
    return storage_manager.storage
