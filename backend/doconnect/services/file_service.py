"""File Service — validates uploads, stores them on disk and records Image rows.

Invariants:
    - Every file of a batch is validated before any byte is written, so a
      rejected file leaves neither rows nor files behind
    - No upload is read past max_file_size + 1 bytes
    - save_files only flushes; the caller commits together with the parent row
    - Only the owner of the parent question/answer or an admin deletes an image
    - Files on disk are removed after the rows are committed away

Design Decisions:
    - Written paths are tracked so a failed commit can discard them
      (discard_written)
"""

import logging
import mimetypes
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import RoleName
from doconnect.core.errors import ForbiddenError, ResourceNotFoundError
from doconnect.core.file_rules import (
    DEFAULT_ALLOWED_EXTENSIONS, DEFAULT_MAX_FILE_SIZE, should_store,
    validate_image_upload,
)
from doconnect.infrastructure.file_storage import LocalFileStorage
from doconnect.models.answer import Answer
from doconnect.models.image import Image
from doconnect.models.question import Question
from doconnect.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(file_name: str) -> str:
    return mimetypes.guess_type(file_name)[0] or DEFAULT_CONTENT_TYPE


class FileService:
    """Image upload, lookup and removal."""

    def __init__(
        self,
        db: AsyncSession,
        storage: LocalFileStorage,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        allowed_extensions: tuple[str, ...] | list[str] = DEFAULT_ALLOWED_EXTENSIONS,
    ):
        self.db = db
        self.storage = storage
        self.max_file_size = max_file_size
        self.allowed_extensions = tuple(allowed_extensions)
        self._written: list[Path] = []

    async def save_files(
        self,
        files: list[UploadFile] | None,
        question_id: int | None = None,
        answer_id: int | None = None,
    ) -> list[Image]:
        if not files:
            return []

        accepted: list[tuple[UploadFile, bytes]] = []
        for upload in files:
            data = await self._read_bounded(upload)
            if not should_store(len(data)):
                logger.debug(f"Skipping empty upload {upload.filename!r}")
                continue
            validate_image_upload(
                upload.filename or "", len(data),
                self.max_file_size, self.allowed_extensions,
            )
            accepted.append((upload, data))

        images = []
        for upload, data in accepted:
            stored_name, path = self.storage.store(upload.filename or "", data)
            self._written.append(path)
            image = Image(
                file_name=stored_name,
                file_path=str(path),
                content_type=(
                    mimetypes.guess_type(stored_name)[0]
                    or upload.content_type or DEFAULT_CONTENT_TYPE
                ),
                file_size=len(data),
                question_id=question_id,
                answer_id=answer_id,
            )
            self.db.add(image)
            images.append(image)

        await self.db.flush()
        logger.info(
            f"Saved {len(images)} images",
            extra={"question_id": question_id, "answer_id": answer_id},
        )
        return images

    async def _read_bounded(self, upload: UploadFile) -> bytes:
        """Read at most max_file_size + 1 bytes; anything longer is rejected anyway."""
        if upload.size is not None and upload.size > self.max_file_size:
            validate_image_upload(
                upload.filename or "", upload.size,
                self.max_file_size, self.allowed_extensions,
            )
        return await upload.read(self.max_file_size + 1)

    def discard_written(self) -> None:
        """Remove files written by this service instance (after a failed commit)."""
        written, self._written = self._written, []
        self.remove_stored_files(str(p) for p in written)

    def remove_stored_files(self, file_paths) -> None:
        for file_path in file_paths:
            self.storage.delete(file_path)

    async def get_image(self, image_id: int) -> tuple[Image, Path]:
        image = await self.db.get(Image, image_id)
        if image is None:
            raise ResourceNotFoundError("Image", image_id)
        path = Path(image.file_path)
        if not path.is_file():
            logger.warning(
                f"Image {image_id} row exists but file is missing: {path}",
                extra={"image_id": image_id},
            )
            raise ResourceNotFoundError("Image file", image_id)
        return image, path

    def resolve_stored(self, file_name: str) -> tuple[Path, str]:
        """Map a public file name to (path, content type); 404 if absent or unsafe."""
        path = self.storage.resolve(file_name)
        if path is None:
            raise ResourceNotFoundError("File", file_name)
        return path, guess_content_type(path.name)

    async def delete_image(self, image_id: int, actor: User) -> None:
        image = await self.db.get(Image, image_id)
        if image is None:
            raise ResourceNotFoundError("Image", image_id)

        if not actor.has_role(RoleName.ADMIN.value):
            owner_id = await self._owner_of(image)
            if owner_id != actor.id:
                raise ForbiddenError("You can only delete images of your own content")

        file_path = image.file_path
        await self.db.delete(image)
        await self.db.commit()
        self.storage.delete(file_path)
        logger.info(
            f"Deleted image {image_id}",
            extra={"image_id": image_id, "user_id": actor.id},
        )

    async def _owner_of(self, image: Image) -> int | None:
        if image.question_id is not None:
            result = await self.db.execute(
                select(Question.user_id).where(Question.id == image.question_id),
            )
            return result.scalar_one_or_none()
        if image.answer_id is not None:
            result = await self.db.execute(
                select(Answer.user_id).where(Answer.id == image.answer_id),
            )
            return result.scalar_one_or_none()
        return None
