"""
Per-run memoization of project and client lookups.

Resolving an entry's client takes two remote lookups (project, then client).
Entries typically share a handful of projects, so each key is fetched at most
once per run and every fetch is preceded by a fixed courtesy delay.
"""

import logging
import time
from typing import Callable, Dict, Optional

from toggl_billing.services.toggl_client import TogglClient

logger = logging.getLogger(__name__)


class LookupCache:
    """
    Memoizes ``project_id -> client_id`` and ``client_id -> client_name``.

    Only successful lookups are cached. A project without a client is
    fetched again the next time it is asked for.

    Attributes:
        client: Time-tracking API client used on cache misses
        delay: Seconds to wait before each remote fetch
    """

    def __init__(
        self,
        client: TogglClient,
        delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.delay = delay
        self._sleep = sleep

        self._client_ids: Dict[int, int] = {}
        self._client_names: Dict[int, str] = {}

        self._stats = {
            "project_hits": 0,
            "project_fetches": 0,
            "client_hits": 0,
            "client_fetches": 0,
        }

    def _throttle(self) -> None:
        if self.delay > 0:
            self._sleep(self.delay)

    def resolve_client_id(self, project_id: int) -> Optional[int]:
        """
        Return the client id of a project, or None if it has no client.

        Raises:
            TogglAPIError: If the project cannot be fetched
        """
        if project_id in self._client_ids:
            self._stats["project_hits"] += 1
            return self._client_ids[project_id]

        self._throttle()
        project = self.client.get_project(project_id)
        self._stats["project_fetches"] += 1

        if project.client_id is None:
            logger.debug(f"Project {project_id} ({project.name}) has no client")
            return None

        self._client_ids[project_id] = project.client_id
        return project.client_id

    def resolve_client_name(self, client_id: int) -> str:
        """
        Return the name of a client.

        Raises:
            TogglAPIError: If the client cannot be fetched
            MalformedRecordError: If the client record has no name
        """
        if client_id in self._client_names:
            self._stats["client_hits"] += 1
            return self._client_names[client_id]

        self._throttle()
        client = self.client.get_client(client_id)
        self._stats["client_fetches"] += 1

        name = client.require_name()
        self._client_names[client_id] = name
        return name

    def get_statistics(self) -> Dict[str, int]:
        """Return hit and fetch counters for both mappings."""
        return self._stats.copy()
