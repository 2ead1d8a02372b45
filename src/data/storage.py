"""
Session-scoped storage for uploaded series and forecast results.
"""

import threading
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd

from models.data_models import ModelResult

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DatasetSnapshot:
    """A stored series together with its write version."""
    version: int
    stored_at: datetime
    data: pd.DataFrame


@dataclass
class _Session:
    time_series: Optional[DatasetSnapshot] = None
    processed: Optional[DatasetSnapshot] = None
    latest_result: Optional[ModelResult] = None
    version: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock)


class ForecastStore(ABC):
    """Abstract base class for forecast pipeline storage."""

    @abstractmethod
    def store_time_series(self, session_id: str, data: pd.DataFrame) -> DatasetSnapshot:
        """Store a gap-filled series."""
        pass

    @abstractmethod
    def get_time_series(self, session_id: str) -> Optional[DatasetSnapshot]:
        """Retrieve the stored gap-filled series."""
        pass

    @abstractmethod
    def store_processed_data(self, session_id: str, data: pd.DataFrame) -> DatasetSnapshot:
        """Store a feature-engineered series."""
        pass

    @abstractmethod
    def get_processed_data(self, session_id: str) -> Optional[DatasetSnapshot]:
        """Retrieve the stored feature-engineered series."""
        pass

    @abstractmethod
    def store_model_result(self, session_id: str, result: ModelResult) -> None:
        """Store a model result as the session's latest."""
        pass

    @abstractmethod
    def get_latest_model_result(self, session_id: str) -> Optional[ModelResult]:
        """Retrieve the session's latest model result."""
        pass

    @abstractmethod
    def clear(self, session_id: Optional[str] = None) -> None:
        """Clear one session, or every session if none is given."""
        pass


class InMemoryForecastStore(ForecastStore):
    """
    Process-local store keyed by session id.

    Writes to a session are serialized by a per-session lock and every stored
    series is wrapped in a versioned snapshot, so a reader always receives a
    complete series even while another request uploads a new one. Stored
    frames are copies and are never modified afterwards.
    """

    def __init__(self):
        self._sessions: Dict[str, _Session] = {}
        self._registry_lock = threading.Lock()

    def _session(self, session_id: str) -> _Session:
        with self._registry_lock:
            if session_id not in self._sessions:
                self._sessions[session_id] = _Session()
            return self._sessions[session_id]

    def _existing(self, session_id: str) -> Optional[_Session]:
        with self._registry_lock:
            return self._sessions.get(session_id)

    def _snapshot(self, session: _Session, data: pd.DataFrame) -> DatasetSnapshot:
        session.version += 1
        return DatasetSnapshot(
            version=session.version,
            stored_at=datetime.now(timezone.utc),
            data=data.copy(),
        )

    def store_time_series(self, session_id: str, data: pd.DataFrame) -> DatasetSnapshot:
        session = self._session(session_id)
        with session.lock:
            session.time_series = self._snapshot(session, data)
            logger.info(f"Stored {len(data)} points for session '{session_id}' "
                        f"(version {session.version})")
            return session.time_series

    def get_time_series(self, session_id: str) -> Optional[DatasetSnapshot]:
        session = self._existing(session_id)
        if session is None:
            return None
        with session.lock:
            return session.time_series

    def store_processed_data(self, session_id: str, data: pd.DataFrame) -> DatasetSnapshot:
        session = self._session(session_id)
        with session.lock:
            session.processed = self._snapshot(session, data)
            return session.processed

    def get_processed_data(self, session_id: str) -> Optional[DatasetSnapshot]:
        session = self._existing(session_id)
        if session is None:
            return None
        with session.lock:
            return session.processed

    def store_model_result(self, session_id: str, result: ModelResult) -> None:
        session = self._session(session_id)
        with session.lock:
            session.latest_result = result

    def get_latest_model_result(self, session_id: str) -> Optional[ModelResult]:
        session = self._existing(session_id)
        if session is None:
            return None
        with session.lock:
            return session.latest_result

    def clear(self, session_id: Optional[str] = None) -> None:
        with self._registry_lock:
            if session_id is None:
                self._sessions.clear()
            else:
                self._sessions.pop(session_id, None)
        logger.info(f"Cleared storage for {session_id or 'all sessions'}")

    def list_sessions(self) -> List[str]:
        """List session ids that have stored anything."""
        with self._registry_lock:
            return sorted(self._sessions)
