"""Project persistence: in-memory for tests and local runs, Redis when configured."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol
from uuid import UUID

from redis.asyncio import Redis

from longform_schemas import Project

from .config import OrchestratorConfig

logger = logging.getLogger(__name__)

PROJECT_KEY_PREFIX = "longform:project:"
PROJECT_INDEX_KEY = "longform:projects"


class ProjectStore(Protocol):
    async def get(self, project_id: UUID) -> Optional[Project]: ...

    async def save(self, project: Project) -> None: ...

    async def list(self) -> list[Project]: ...


class InMemoryProjectStore:
    """Keeps deep copies so callers never share mutable state with the store."""

    def __init__(self) -> None:
        self._projects: dict[UUID, Project] = {}
        self._lock = asyncio.Lock()

    async def get(self, project_id: UUID) -> Optional[Project]:
        project = self._projects.get(project_id)
        return project.model_copy(deep=True) if project else None

    async def save(self, project: Project) -> None:
        async with self._lock:
            self._projects[project.id] = project.model_copy(deep=True)

    async def list(self) -> list[Project]:
        projects = [project.model_copy(deep=True) for project in self._projects.values()]
        return sorted(projects, key=lambda project: project.updated_at, reverse=True)


class RedisProjectStore:
    """Projects stored as JSON documents plus a sorted index by ``updated_at``."""

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisProjectStore":
        return cls(Redis.from_url(url, encoding="utf-8", decode_responses=True))

    @staticmethod
    def _key(project_id: UUID) -> str:
        return f"{PROJECT_KEY_PREFIX}{project_id}"

    async def get(self, project_id: UUID) -> Optional[Project]:
        payload = await self._redis.get(self._key(project_id))
        if not payload:
            return None
        return Project.model_validate_json(payload)

    async def save(self, project: Project) -> None:
        await self._redis.set(self._key(project.id), project.model_dump_json())
        await self._redis.zadd(
            PROJECT_INDEX_KEY, {str(project.id): project.updated_at.timestamp()}
        )

    async def list(self) -> list[Project]:
        project_ids = await self._redis.zrevrange(PROJECT_INDEX_KEY, 0, -1)
        if not project_ids:
            return []
        payloads = await self._redis.mget([f"{PROJECT_KEY_PREFIX}{pid}" for pid in project_ids])
        return [Project.model_validate_json(payload) for payload in payloads if payload]


def build_project_store(config: OrchestratorConfig) -> ProjectStore:
    if config.redis_url:
        logger.info("Using Redis project store")
        return RedisProjectStore.from_url(config.redis_url)
    return InMemoryProjectStore()


__all__ = ["InMemoryProjectStore", "ProjectStore", "RedisProjectStore", "build_project_store"]
