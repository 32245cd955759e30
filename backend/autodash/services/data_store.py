"""
Data Storage Service

File-based storage for uploaded datasets. Each dataset keeps its record
sequence in memory and on disk as one JSON document. Records are only ever
replaced as a whole; profiles are not stored and are recomputed from the
records on every read.

The built-in sample dataset is always present under ``SAMPLE_DATASET_ID``.
"""

import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..models.profile import Record
from .sample_data import SAMPLE_DATASET_ID, SAMPLE_DATASET_NAME, sample_records

logger = logging.getLogger("autodash.data_store")


class DataStore:
    """
    File-based dataset store.
    Thread-safe implementation for concurrent access.
    """

    def __init__(self, data_dir: str = None):
        if data_dir is None:
            data_dir = settings.DATA_DIR
        self.data_dir = Path(data_dir)
        self.datasets_dir = self.data_dir / "datasets"
        self.datasets_dir.mkdir(parents=True, exist_ok=True)

        # Thread lock for concurrent access
        self._lock = threading.RLock()

        self._datasets: Dict[str, Dict[str, Any]] = {}
        self._load_datasets()
        self._ensure_sample()

    @staticmethod
    def _atomic_write(file_path: Path, data: Any, indent: int = None) -> None:
        """Write JSON data atomically: write to temp file, then rename."""
        dir_path = file_path.parent
        fd, tmp_path = tempfile.mkstemp(dir=str(dir_path), suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=indent, default=str)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, str(file_path))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _dataset_file(self, dataset_id: str) -> Path:
        return self.datasets_dir / f"{dataset_id}.json"

    def _load_datasets(self):
        """Load all datasets from disk into memory."""
        with self._lock:
            for dataset_file in self.datasets_dir.glob("*.json"):
                try:
                    with open(dataset_file) as f:
                        dataset = json.load(f)
                    self._datasets[dataset["id"]] = dataset
                except (OSError, ValueError, KeyError) as e:
                    logger.error("Error loading dataset %s: %s", dataset_file, e)

    def _ensure_sample(self):
        with self._lock:
            if SAMPLE_DATASET_ID not in self._datasets:
                self._save(self._new_dataset(
                    SAMPLE_DATASET_ID, SAMPLE_DATASET_NAME, "csv", sample_records(), is_sample=True,
                ))

    @staticmethod
    def _new_dataset(
        dataset_id: str,
        name: str,
        source_format: str,
        records: List[Record],
        is_sample: bool = False,
    ) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return {
            "id": dataset_id,
            "name": name,
            "source_format": source_format,
            "is_sample": is_sample,
            "records": list(records),
            "created_at": now,
            "updated_at": now,
        }

    def _save(self, dataset: Dict[str, Any]) -> Dict[str, Any]:
        self._atomic_write(self._dataset_file(dataset["id"]), dataset)
        self._datasets[dataset["id"]] = dataset
        return dataset

    # ============ Dataset Operations ============

    def create_dataset(self, name: str, records: List[Record], source_format: str = "csv") -> Dict[str, Any]:
        """Store a new dataset and return it."""
        with self._lock:
            dataset = self._new_dataset(uuid.uuid4().hex[:12], name, source_format, records)
            logger.info("Created dataset %s (%s, %d records)", dataset["id"], name, len(records))
            return self._save(dataset)

    def get_dataset(self, dataset_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._datasets.get(dataset_id)

    def get_records(self, dataset_id: str) -> Optional[List[Record]]:
        """The current record sequence, or None for an unknown dataset."""
        with self._lock:
            dataset = self._datasets.get(dataset_id)
            return dataset["records"] if dataset else None

    def list_datasets(self) -> List[Dict[str, Any]]:
        """Dataset metadata (without records), sample first."""
        with self._lock:
            datasets = sorted(
                self._datasets.values(),
                key=lambda d: (not d.get("is_sample", False), d.get("created_at", "")),
            )
            return [{k: v for k, v in d.items() if k != "records"} for d in datasets]

    def replace_records(
        self,
        dataset_id: str,
        records: List[Record],
        name: Optional[str] = None,
        source_format: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Swap in a new record sequence. The previous list is left untouched."""
        with self._lock:
            current = self._datasets.get(dataset_id)
            if current is None:
                return None

            dataset = {
                **current,
                "records": list(records),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
            if name is not None:
                dataset["name"] = name
            if source_format is not None:
                dataset["source_format"] = source_format
            logger.info("Replaced records of dataset %s (%d records)", dataset_id, len(records))
            return self._save(dataset)

    def reset_to_sample(self, dataset_id: str) -> Optional[Dict[str, Any]]:
        """Replace a dataset's records with the built-in sample."""
        return self.replace_records(dataset_id, sample_records())

    def delete_dataset(self, dataset_id: str) -> bool:
        """Delete a dataset. The sample dataset cannot be deleted."""
        with self._lock:
            if dataset_id not in self._datasets or dataset_id == SAMPLE_DATASET_ID:
                return False

            del self._datasets[dataset_id]
            dataset_file = self._dataset_file(dataset_id)
            if dataset_file.exists():
                dataset_file.unlink()
            logger.info("Deleted dataset %s", dataset_id)
            return True


data_store = DataStore()
