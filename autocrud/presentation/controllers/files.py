"""FileCrudController - CRUD controller for records that carry one file.

Records store the file itself: name, size, MIME type and the raw bytes
(attribute names configurable). Uploads are read fully into memory.

Routes added on top of the regular API routes:
    POST   <r>/files         upload_file
    POST   <r>/files/batch   upload_multiple_files
    PUT    <r>/{id}/file     update_file
    GET    <r>/{id}/file     download_file
    DELETE <r>/{id}/file     delete_file
"""

from collections.abc import Collection
from typing import Any, ClassVar
from urllib.parse import quote

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request
from starlette.responses import Response

from autocrud.core.enums import ErrorCode
from autocrud.core.errors import DomainError, NotFoundError, ValidationError
from autocrud.core.result import Failure
from autocrud.presentation.controllers.base import RESERVED_INPUT, CrudController


class FileCrudController(CrudController):
    """CRUD controller with single and batch file upload.

    Class attributes:
        file_field: Form field holding a single upload.
        files_field: Form field holding a batch of uploads (``files[]`` works too).
        filename_attribute / size_attribute / mime_type_attribute /
        content_attribute: Model attributes receiving the file data.
        max_file_size: Largest accepted upload in bytes (None for no limit).
        allowed_mime_types: Accepted MIME types (empty accepts any).
    """

    file_field: ClassVar[str] = "file"
    files_field: ClassVar[str] = "files"
    filename_attribute: ClassVar[str] = "filename"
    size_attribute: ClassVar[str] = "size"
    mime_type_attribute: ClassVar[str] = "mime_type"
    content_attribute: ClassVar[str] = "content"
    max_file_size: ClassVar[int | None] = None
    allowed_mime_types: ClassVar[Collection[str]] = ()

    async def _read_upload(self, upload: Any) -> tuple[dict[str, Any] | None, str | None]:
        """Return (attributes, None) for a usable upload, (None, reason) otherwise."""
        if not isinstance(upload, UploadFile) or not upload.filename:
            return None, "No file was uploaded."

        content = await upload.read()
        mime_type = upload.content_type or "application/octet-stream"
        if not content:
            return None, "The file is empty."
        if self.max_file_size is not None and len(content) > self.max_file_size:
            return None, f"The file may not be greater than {self.max_file_size} bytes."
        if self.allowed_mime_types and mime_type not in self.allowed_mime_types:
            return None, f"The file type {mime_type} is not allowed."

        return {
            self.filename_attribute: upload.filename,
            self.size_attribute: len(content),
            self.mime_type_attribute: mime_type,
            self.content_attribute: content,
        }, None

    def _extra_fields(self, form: FormData) -> dict[str, Any]:
        skip = RESERVED_INPUT | {
            self.file_field,
            self.files_field,
            f"{self.files_field}[]",
        }
        return {
            key: value
            for key, value in form.multi_items()
            if key not in skip and not isinstance(value, UploadFile)
        }

    def _file_error(self, field: str, reason: str) -> Response:
        return self.fail(
            ValidationError(code=ErrorCode.FILE_INVALID, errors={field: [reason]})
        )

    @staticmethod
    def _failure_reason(error: DomainError) -> str:
        if isinstance(error, ValidationError) and error.errors:
            return "; ".join(message for messages in error.errors.values() for message in messages)
        if error.details and "error" in error.details:
            return f"{error.message}: {error.details['error']}"
        return error.message

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def upload_file(self, request: Request, session: AsyncSession) -> Response:
        """Create a record from one uploaded file plus any other form fields."""
        form = await request.form()
        attributes, reason = await self._read_upload(form.get(self.file_field))
        if attributes is None:
            return self._file_error(self.file_field, reason or "Invalid file.")

        result = await self.service(session).create(self._extra_fields(form), attach=attributes)
        if isinstance(result, Failure):
            return self.fail(result.error)
        return self.respond(
            request,
            self.present(result.value),
            "File uploaded successfully.",
            status.HTTP_201_CREATED,
        )

    async def upload_multiple_files(self, request: Request, session: AsyncSession) -> Response:
        """Create one record per uploaded file.

        Returns 200 when every file was stored and 207 when some failed; the
        failures are listed in ``meta.failed`` with their 1-based ``index``.
        """
        form = await request.form()
        uploads = form.getlist(self.files_field) + form.getlist(f"{self.files_field}[]")
        if not uploads:
            return self._file_error(self.files_field, "The files field is required.")

        service = self.service(session)
        extras = self._extra_fields(form)
        uploaded: list[Any] = []
        failed: list[dict[str, Any]] = []

        for index, upload in enumerate(uploads, start=1):
            filename = getattr(upload, "filename", None)
            attributes, reason = await self._read_upload(upload)
            if attributes is None:
                failed.append({"index": index, "filename": filename, "error": reason})
                continue

            result = await service.create(extras, attach=attributes)
            if isinstance(result, Failure):
                failed.append(
                    {
                        "index": index,
                        "filename": filename,
                        "error": self._failure_reason(result.error),
                    }
                )
                continue
            # A later rollback expires earlier records, so serialize now
            uploaded.append(self.present(result.value))

        if failed:
            self.logger.warning(
                "file_upload_partial_failure",
                total_uploaded=len(uploaded),
                total_failed=len(failed),
                failed_indexes=[entry["index"] for entry in failed],
            )

        return self.formatter.success(
            uploaded,
            "Files uploaded successfully." if not failed else "Some files failed to upload.",
            status.HTTP_207_MULTI_STATUS if failed else status.HTTP_200_OK,
            request,
            resource_type=self.resource.route_base,
            meta={
                "total_uploaded": len(uploaded),
                "total_failed": len(failed),
                "failed": failed,
            },
        )

    async def update_file(
        self, request: Request, session: AsyncSession, record_id: str
    ) -> Response:
        """Replace the file stored on a record."""
        service = self.service(session)
        found = await service.find(record_id)
        if isinstance(found, Failure):
            return self.fail(found.error)
        if found.value is None:
            return self.not_found(request, record_id)

        form = await request.form()
        attributes, reason = await self._read_upload(form.get(self.file_field))
        if attributes is None:
            return self._file_error(self.file_field, reason or "Invalid file.")

        result = await service.update(record_id, self._extra_fields(form), attach=attributes)
        if isinstance(result, Failure):
            return self.fail(result.error)
        return self.respond(request, self.present(result.value), "File updated successfully.")

    async def download_file(
        self, request: Request, session: AsyncSession, record_id: str
    ) -> Response:
        """Stream the stored bytes back as an attachment."""
        found = await self.service(session).find(record_id)
        if isinstance(found, Failure):
            return self.fail(found.error)
        record = found.value
        if record is None:
            return self.not_found(request, record_id)

        content = getattr(record, self.content_attribute, None)
        if content is None:
            return self.fail(
                NotFoundError(
                    message="File not found",
                    resource_type=self.resource.name,
                    resource_id=record_id,
                )
            )

        filename = getattr(record, self.filename_attribute, None) or "download"
        return Response(
            content=bytes(content),
            media_type=getattr(record, self.mime_type_attribute, None)
            or "application/octet-stream",
            headers={
                "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"
            },
        )

    async def delete_file(
        self, request: Request, session: AsyncSession, record_id: str
    ) -> Response:
        """Clear the file attributes of a record; the record itself stays."""
        service = self.service(session)
        found = await service.find(record_id)
        if isinstance(found, Failure):
            return self.fail(found.error)
        if found.value is None:
            return self.not_found(request, record_id)

        cleared = {
            self.filename_attribute: None,
            self.size_attribute: None,
            self.mime_type_attribute: None,
            self.content_attribute: None,
        }
        result = await service.update(record_id, {}, attach=cleared)
        if isinstance(result, Failure):
            return self.fail(result.error)
        return self.respond(request, None, "File deleted successfully.", status.HTTP_204_NO_CONTENT)
