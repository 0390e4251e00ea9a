"""
JSON Record Store
Append-only persistence to flat JSON files, one list per data type.

    case       -> <data_dir>/cases-data.json       {"cases":  [...]}
    regulation -> <data_dir>/compliance-data.json  {"alerts": [...]}
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import schema

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """
    Persistence collaborator for the save gate.

    ``save`` takes ``{"data": record, "dataType": "case" | "regulation"}`` and
    answers ``{"success": bool, "message" | "error": str, "data": record}``.
    Writes go through a temp file and a rename. A corrupt file is moved aside
    before a new document is started. I/O errors on the primary file are
    raised as OSError; a failed mirror copy is only logged.
    """

    def __init__(self, data_dir: str = "data", mirror_dir: Optional[str] = None):
        """
        Args:
            data_dir: Directory holding the JSON files
            mirror_dir: Optional second directory that receives an identical copy
        """
        self.data_dir = Path(data_dir)
        self.mirror_dir = Path(mirror_dir) if mirror_dir else None

    def _target(self, data_type: str):
        file_name, key = schema.STORAGE_TARGETS[data_type]
        return self.data_dir / file_name, key

    def _read_document(self, path: Path, key: str, backup_corrupt: bool = False) -> Dict[str, Any]:
        if not path.exists():
            return {key: []}
        with open(path, 'r', encoding='utf-8') as f:
            try:
                document = json.load(f)
            except json.JSONDecodeError:
                document = None
        if not isinstance(document, dict):
            if backup_corrupt:
                backup = path.with_name(f"{path.name}.corrupt-{int(time.time())}")
                path.replace(backup)
                logger.warning(f"{path} is not a valid record document, moved to {backup}")
            return {key: []}
        if not isinstance(document.get(key), list):
            document[key] = []
        return document

    def _write_document(self, path: Path, document: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write atomically (write to temp then rename)
        temp_path = path.with_name(path.name + '.tmp')
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def save(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = payload.get("data") if isinstance(payload, dict) else None
        data_type = payload.get("dataType") if isinstance(payload, dict) else None

        if not data or not data_type:
            return {"success": False, "error": "Missing required parameters: data, dataType"}
        if data_type not in schema.STORAGE_TARGETS:
            return {"success": False, "error": f"Unsupported data type: {data_type}"}

        path, key = self._target(data_type)
        document = self._read_document(path, key, backup_corrupt=True)
        document[key].append(data)

        # The primary write is the commit; the mirror is a best-effort copy
        self._write_document(path, document)
        if self.mirror_dir is not None:
            try:
                self._write_document(self.mirror_dir / path.name, document)
            except OSError as e:
                logger.warning(f"Record {data.get('id')} saved but mirror copy failed: {e}")

        logger.info(f"Appended {data_type} record {data.get('id')} to {path} ({len(document[key])} total)")
        return {"success": True, "message": "Data saved successfully", "data": data}

    def load(self, data_type: str) -> List[Dict[str, Any]]:
        """All stored records of one type."""
        path, key = self._target(data_type)
        return list(self._read_document(path, key)[key])
