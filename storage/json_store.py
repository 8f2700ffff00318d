# -*- coding: utf-8 -*-
"""JSON-file backed remote store: one file per roster scope.

Each file holds ``{"scope": ..., "records": [{"id": ..., "fields": {...}}]}``.
Commits upsert by id and rewrite the file atomically.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import time
from pathlib import Path
from typing import Any, Dict, List

from core.keys import CommitStatus, StoreKeys as K
from core.records import copy_value
from core.types import RecordSeed
from storage.remote_store import CommitRequest, CommitResult

log = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


class JsonFileRemoteStore:
    def __init__(self, base_path: str | os.PathLike = "data") -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._scope = None
        self._lock = asyncio.Lock()

    def _path(self, scope: Any) -> Path:
        name = _SAFE_NAME.sub("_", str(scope)).strip("_") or "default"
        return self.base_path / f"{name}.json"

    def _read(self, scope: Any) -> Dict[str, Any]:
        path = self._path(scope)
        if not path.exists():
            return {K.SCOPE: str(scope), K.RECORDS: []}
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not isinstance(data.get(K.RECORDS), list):
            raise ValueError(f"Malformed roster file: {path}")
        return data

    def _write(self, scope: Any, data: Dict[str, Any]) -> None:
        path = self._path(scope)
        tmp = path.with_suffix(".json.tmp")
        data[K.UPDATED_AT] = time.strftime("%Y-%m-%dT%H:%M:%S")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)

    async def load_roster(self, scope: Any) -> List[RecordSeed]:
        self._scope = scope
        data = self._read(scope)
        seeds = [RecordSeed(id=row[K.ID], fields=copy_value(row.get(K.FIELDS))) for row in data[K.RECORDS]]
        log.info("Loaded roster scope=%s records=%d", scope, len(seeds))
        return seeds

    async def commit(self, records: List[CommitRequest]) -> List[CommitResult]:
        if self._scope is None:
            raise RuntimeError("load_roster() must be called before commit()")
        async with self._lock:
            data = self._read(self._scope)
            rows = {row[K.ID]: row for row in data[K.RECORDS]}
            out: List[CommitResult] = []
            for req in records:
                row = rows.get(req.id)
                if row is None:
                    row = {K.ID: req.id, K.FIELDS: {}}
                    data[K.RECORDS].append(row)
                    rows[req.id] = row
                fields = copy_value(row.get(K.FIELDS))
                fields.update(copy_value(req.fields))
                row[K.FIELDS] = fields
                out.append(CommitResult(id=req.id, status=CommitStatus.OK, committed_value=copy_value(fields)))
            self._write(self._scope, data)
        return out
