"""
Project store

All projects live in one JSON file holding an array of records. Every
operation reads the whole document, changes it in memory and writes the
whole document back. Nothing is cached between calls and there is no
locking: two overlapping writers can lose an update.
"""
import os
import re
import json
import logging
from uuid import uuid4
from datetime import datetime, timezone
from typing import Optional, Union
import aiofiles
import aiofiles.os

from apps.shared.errors import NotFoundError, StorageError, ValidationError
from apps.projects.schemas import DEFAULT_IMAGE, REQUIRED_FIELDS, ProjectRecord
from apps.media.tasks import discard_image
from apps.media.utils import is_media_url

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("overview", "role", "liveUrl", "githubUrl")
LIST_FIELDS = ("tasks", "achievements", "challenges", "solutions", "technologies")

# Never taken from client payloads
PROTECTED_FIELDS = ("id", "createdAt", "updatedAt")

NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """'My Cool App!' -> 'my-cool-app'"""
    return NON_ALNUM.sub("-", (title or "").lower()).strip("-")


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_project_id(project_id: Union[int, str]) -> Optional[int]:
    if isinstance(project_id, int):
        return project_id
    try:
        return int(str(project_id).strip())
    except ValueError:
        return None


def pair_solutions(record: dict) -> None:
    """Pad solutions with empty strings so every challenge has one."""
    challenges = record.get("challenges") or []
    solutions = list(record.get("solutions") or [])
    if len(solutions) < len(challenges):
        solutions.extend([""] * (len(challenges) - len(solutions)))
    record["solutions"] = solutions


class ProjectStore:
    """Project records persisted as a single pretty-printed JSON array."""

    def __init__(self, path: str, media=None):
        self.path = path
        self.media = media

    # ──────────────────────────────────────────────────────────────────────
    # Document primitives
    # ──────────────────────────────────────────────────────────────────────

    async def read_document(self) -> list[dict]:
        """
        Read every stored record.
        A missing file is created with an empty array. Invalid JSON raises
        StorageError instead of being reset, so existing data is never lost.
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.info(f"Projects file {self.path} not found, initializing")
            await self.write_document([])
            return []
        except OSError as e:
            logger.error(f"Failed to read projects file {self.path}: {e}")
            raise StorageError("Failed to read projects") from e

        if not raw.strip():
            return []

        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.error(f"Projects file {self.path} is not valid JSON: {e}")
            raise StorageError("Projects data is corrupt") from e

        if not isinstance(records, list):
            logger.error(f"Projects file {self.path} does not contain an array")
            raise StorageError("Projects data is corrupt")

        return records

    async def write_document(self, records: list[dict]) -> None:
        """
        Replace the stored document.
        Each write gets its own temp file beside the target, then renamed.
        """
        directory = os.path.dirname(self.path)
        tmp_path = f"{self.path}.{uuid4().hex}.tmp"

        try:
            if directory:
                await aiofiles.os.makedirs(directory, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(records, indent=2, ensure_ascii=False))
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write projects file {self.path}: {e}")
            raise StorageError("Failed to save projects") from e
        finally:
            await self._remove_stale(tmp_path)

    @staticmethod
    async def _remove_stale(tmp_path: str) -> None:
        if not await aiofiles.os.path.exists(tmp_path):
            return
        try:
            await aiofiles.os.remove(tmp_path)
        except OSError as e:
            logger.warning(f"Could not remove temp file {tmp_path}: {e}")

    # ──────────────────────────────────────────────────────────────────────
    # Operations
    # ──────────────────────────────────────────────────────────────────────

    async def list_projects(self) -> list[ProjectRecord]:
        """All projects, most recently created first."""
        records = await self.read_document()
        return [ProjectRecord.model_validate(r) for r in reversed(records)]

    async def get_project(self, project_id: Union[int, str]) -> ProjectRecord:
        records = await self.read_document()
        index = self._find(records, project_id)
        return ProjectRecord.model_validate(records[index])

    async def create_project(self, data: dict) -> ProjectRecord:
        """
        Append a new project.

        data uses the camelCase keys of the stored document. title,
        description and category are required; every missing one is
        named in the ValidationError.
        """
        missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

        records = await self.read_document()
        next_id = max((r.get("id") or 0 for r in records), default=0) + 1
        now = utc_timestamp()

        record = {
            "id": next_id,
            "title": data["title"],
            "description": data["description"],
            "category": data["category"],
            "image": data.get("image") or DEFAULT_IMAGE,
            "slug": data.get("slug") or slugify(data["title"]),
        }
        for field in TEXT_FIELDS:
            record[field] = data.get(field) or ""
        for field in LIST_FIELDS:
            record[field] = list(data.get(field) or [])
        pair_solutions(record)
        record["createdAt"] = now
        record["updatedAt"] = now

        records.append(record)
        await self.write_document(records)

        logger.info(f"Created project {next_id} ({record['slug']})")
        return ProjectRecord.model_validate(record)

    async def update_project(self, project_id: Union[int, str], changes: dict) -> ProjectRecord:
        """
        Shallow-merge changes over an existing project.

        Lists are replaced, not merged. If the image changed and the old one
        was hosted, the old image is deleted on a best-effort basis.
        """
        records = await self.read_document()
        index = self._find(records, project_id)
        existing = records[index]

        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}
        updated = {**existing, **changes}
        if "challenges" in changes or "solutions" in changes:
            pair_solutions(updated)

        now = utc_timestamp()
        previous = existing.get("updatedAt")
        updated["updatedAt"] = previous if previous and previous > now else now

        records[index] = updated
        await self.write_document(records)
        logger.info(f"Updated project {updated['id']}")

        old_image = existing.get("image")
        if old_image != updated.get("image") and is_media_url(old_image):
            await discard_image(self.media, old_image)

        return ProjectRecord.model_validate(updated)

    async def delete_project(self, project_id: Union[int, str]) -> ProjectRecord:
        """Remove a project and, best-effort, its hosted image."""
        records = await self.read_document()
        index = self._find(records, project_id)
        removed = records.pop(index)

        await self.write_document(records)
        logger.info(f"Deleted project {removed['id']}")

        if is_media_url(removed.get("image")):
            await discard_image(self.media, removed["image"])

        return ProjectRecord.model_validate(removed)

    @staticmethod
    def _find(records: list[dict], project_id: Union[int, str]) -> int:
        wanted = parse_project_id(project_id)
        if wanted is not None:
            for index, record in enumerate(records):
                if record.get("id") == wanted:
                    return index
        raise NotFoundError("Project not found")
