# ==============================================
# BufferSessionStore
# ==============================================
#
# PURPOSE:
#   Owns the BufferManagers of several concurrent import sessions,
#   keyed by opaque generated tokens. The store is an ordinary
#   object: whoever creates it controls its lifetime; there is no
#   module-level registry.
#
#   Methods:
#   --------
#   - create(cluster_id=None, **manager_kwargs) -> str
#   - get(token) -> BufferManager
#   - dispose(token) -> list    (documents that were still buffered)
#   - close() -> dict[token, list]
#
# ==============================================

import logging
import uuid
from typing import Any, Dict, List, Optional

from ..exceptions import UnknownSessionError
from .buffer_manager import BufferManager

logger = logging.getLogger(__name__)


class BufferSessionStore:
    """Explicit registry of BufferManager sessions."""

    def __init__(self):
        self._sessions: Dict[str, BufferManager] = {}

    def create(self, cluster_id: Optional[str] = None, **manager_kwargs) -> str:
        """
        Start a session with a fresh BufferManager.

        Args:
            cluster_id: Target cluster identifier passed to the manager.
            **manager_kwargs: config / size_estimator / provider / limit overrides.

        Returns:
            Token identifying the session.
        """
        manager = BufferManager(cluster_id=cluster_id, **manager_kwargs)
        token = uuid.uuid4().hex
        self._sessions[token] = manager
        logger.debug("Created buffer session %s (cluster=%s)", token, cluster_id)
        return token

    def get(self, token: str) -> BufferManager:
        try:
            return self._sessions[token]
        except KeyError:
            raise UnknownSessionError(token) from None

    def dispose(self, token: str) -> List[Any]:
        """
        End a session and drop its manager.

        Returns:
            Documents still buffered in that session, in destination then
            insertion order. The store no longer holds them.
        """
        manager = self._sessions.pop(token, None)
        if manager is None:
            raise UnknownSessionError(token)

        leftovers = []
        for documents in manager.flush_all().values():
            leftovers.extend(documents)
        if leftovers:
            logger.warning("Session %s disposed with %d unflushed documents", token, len(leftovers))
        return leftovers

    def close(self) -> Dict[str, List[Any]]:
        """Dispose every session; returns leftovers of sessions that had any."""
        leftovers = {}
        for token in list(self._sessions):
            documents = self.dispose(token)
            if documents:
                leftovers[token] = documents
        return leftovers

    def __contains__(self, token: str) -> bool:
        return token in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
