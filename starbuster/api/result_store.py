"""File-backed storage for shareable analysis results."""

import datetime
import json
import logging
import os
import re
import uuid
from typing import Dict, Optional

from starbuster.core.constants import DEFAULT_RESULTS_DIR, RESULT_TTL_DAYS
from starbuster.utils.date_utils import to_naive_datetime, utc_now

logger = logging.getLogger(__name__)

_RESULT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class ResultStore:
    """
    Stores analysis results so they can be shared and re-rendered by id.

    Each result is one JSON file holding a row with the repository and
    analysis payloads plus ``created_at`` and ``expires_at`` timestamps.
    Expired rows are invisible to readers.

    Attributes:
        results_dir: Directory where result files are stored
        ttl_days: Lifetime of a saved result in days
    """

    def __init__(self, results_dir: str = DEFAULT_RESULTS_DIR, ttl_days: int = RESULT_TTL_DAYS):
        """
        Initialize the result store.

        Args:
            results_dir: Base directory for stored results
            ttl_days: Days until a saved result expires
        """
        self.results_dir = os.path.join(results_dir, "analysis_results")
        self.ttl_days = ttl_days

        os.makedirs(self.results_dir, exist_ok=True)

    def _get_result_path(self, result_id: str) -> Optional[str]:
        """
        Get the file path for a result id.

        Args:
            result_id: Opaque result identifier

        Returns:
            Optional[str]: Path to the result file, None for ids that are not
            safe to use as a filename
        """
        if not result_id or not _RESULT_ID_PATTERN.match(result_id):
            return None
        return os.path.join(self.results_dir, f"{result_id}.json")

    def save(self, payload: Dict, now: Optional[datetime.datetime] = None) -> Dict:
        """
        Persist an analysis payload from the service.

        Args:
            payload: Service response with ``repository``, ``analysis`` and
                ``metadata`` objects
            now: Creation time, defaults to the current UTC time

        Returns:
            Dict: The stored row, including its new ``id``
        """
        created_at = to_naive_datetime(now) if now is not None else utc_now()
        expires_at = created_at + datetime.timedelta(days=self.ttl_days)

        repository = payload.get("repository", {}) or {}
        analysis = payload.get("analysis", {}) or {}
        metadata = payload.get("metadata", {}) or {}

        full_name = repository.get("fullName") or repository.get("full_name") or ""
        owner, _, name = full_name.partition("/")

        record = {
            "id": uuid.uuid4().hex,
            "repo_owner": owner,
            "repo_name": name,
            "repo_url": f"https://github.com/{full_name}" if full_name else "",
            "suspicion_score": analysis.get("suspicionScore", 0),
            "total_stars": analysis.get("totalStars", 0),
            "analyzed_sample": analysis.get("analyzedSample", 0),
            "analysis_type": metadata.get("analysisType", "basic"),
            "suspicion_indicators": list(analysis.get("suspicionIndicators", []) or []),
            "repository_data": repository,
            "analysis_data": analysis,
            "metadata": metadata,
            "created_at": created_at.isoformat(),
            "expires_at": expires_at.isoformat(),
        }

        result_path = self._get_result_path(record["id"])
        with open(result_path, "w", encoding="utf-8") as f:
            json.dump(record, f)

        logger.info(f"Saved analysis result {record['id']} for {full_name or 'unknown repository'}")
        return record

    def _read(self, result_path: str) -> Optional[Dict]:
        try:
            with open(result_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading stored result {result_path}: {e}")
            return None

    @staticmethod
    def _is_expired(record: Dict, now: datetime.datetime) -> bool:
        expires_at = record.get("expires_at")
        if not expires_at:
            return True
        try:
            return to_naive_datetime(expires_at) <= now
        except (TypeError, ValueError, OverflowError):
            return True

    def get(self, result_id: str, now: Optional[datetime.datetime] = None) -> Optional[Dict]:
        """
        Retrieve a stored result if it exists and has not expired.

        Args:
            result_id: Result identifier returned by save()
            now: Reference time for the expiry check, defaults to UTC now

        Returns:
            Optional[Dict]: The stored row, or None when missing/expired
        """
        result_path = self._get_result_path(result_id)
        if result_path is None or not os.path.exists(result_path):
            logger.debug(f"No stored result for id {result_id!r}")
            return None

        record = self._read(result_path)
        if record is None:
            return None

        reference = to_naive_datetime(now) if now is not None else utc_now()
        if self._is_expired(record, reference):
            logger.debug(f"Stored result {result_id} expired at {record.get('expires_at')}")
            return None
        return record

    def purge_expired(self, now: Optional[datetime.datetime] = None) -> int:
        """Delete expired or unreadable result files and return how many were removed."""
        reference = to_naive_datetime(now) if now is not None else utc_now()
        removed = 0
        for filename in os.listdir(self.results_dir):
            if not filename.endswith(".json"):
                continue
            result_path = os.path.join(self.results_dir, filename)
            record = self._read(result_path)
            if record is None or self._is_expired(record, reference):
                os.remove(result_path)
                removed += 1
        if removed:
            logger.info(f"Purged {removed} expired analysis result(s)")
        return removed


def payload_from_record(record: Dict) -> Dict:
    """Rebuild a service-shaped payload from a stored row for rendering."""
    metadata = dict(record.get("metadata") or {})
    metadata.setdefault("analyzedAt", record.get("created_at"))
    metadata.setdefault("analysisType", record.get("analysis_type", "basic"))
    return {
        "id": record.get("id"),
        "repository": record.get("repository_data") or {},
        "analysis": record.get("analysis_data") or {},
        "metadata": metadata,
        "createdAt": record.get("created_at"),
        "expiresAt": record.get("expires_at"),
    }
