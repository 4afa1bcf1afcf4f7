from pathlib import Path
import json
import threading
from typing import Any, Dict, List, Optional


class ProjectStore:
    """Saved projects as one JSON file on disk: {"<id>": record}. Ids are integers starting at 1."""

    COLLECTION = "projects"

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.COLLECTION}.json"

    def _load(self) -> Dict[str, Any]:
        p = self.path
        if not p.exists():
            return {}
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, obj: Dict[str, Any]):
        p = self.path
        with p.open("w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2, ensure_ascii=False)

    def list(self) -> List[Dict[str, Any]]:
        """Most recently edited first."""
        projects = list(self._load().values())
        return sorted(projects, key=lambda p: str(p.get("last_edited") or ""), reverse=True)

    def get(self, project_id: int) -> Optional[Dict[str, Any]]:
        return self._load().get(str(project_id))

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            data = self._load()
            new_id = max((int(k) for k in data), default=0) + 1
            project = {**record, "id": new_id}
            data[str(new_id)] = project
            self._save(data)
        return project

    def update(self, project_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._load()
            existing = data.get(str(project_id))
            if existing is None:
                return None
            project = {**existing, **changes, "id": int(project_id)}
            data[str(project_id)] = project
            self._save(data)
        return project

    def delete(self, project_id: int) -> bool:
        with self._lock:
            data = self._load()
            if data.pop(str(project_id), None) is None:
                return False
            self._save(data)
        return True
