"""Drive: a named blob container."""

from typing import Any, Iterable, List, Optional, Union

from .errors import BuilderValidationError, DetaError, TransportError
from .query.builder import max_limit, validate_cursor, validate_limit
from .query.pagination import QueryPage, collect_items, iterate_pages, parse_drive_page
from .utils.config import COMPONENT_DRIVE, MAX_DELETE_FILES, get_config
from .utils.logging import get_smart_logger, log_operation

logger = get_smart_logger(COMPONENT_DRIVE)

OCTET_STREAM = {"Content-Type": "application/octet-stream"}


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise BuilderValidationError(f"File name must be a non-empty string, got {name!r}")
    return name


class Drive:
    """File operations against one Drive.

    ``transport`` is rooted at ``<drive_url>/<project_id>/<name>``.
    """

    def __init__(self, name: str, transport, chunk_size: Optional[int] = None):
        if not isinstance(name, str) or not name:
            raise BuilderValidationError(f"Drive name must be a non-empty string, got {name!r}")
        self.name = name
        self.transport = transport
        self.chunk_size = chunk_size or get_config().chunk_size
        if self.chunk_size <= 0:
            raise BuilderValidationError(f"Chunk size must be positive, got {self.chunk_size}")

    def __repr__(self) -> str:
        return f"Drive(name={self.name!r})"

    def list(self, prefix: Optional[str] = None, limit: Optional[int] = None,
             last: Optional[str] = None) -> QueryPage:
        """List one page of file names; ``limit`` defaults to the page size cap."""
        params = {"limit": validate_limit(max_limit() if limit is None else limit)}
        if prefix is not None:
            if not isinstance(prefix, str):
                raise BuilderValidationError(f"Prefix must be a string, got {prefix!r}")
            params["prefix"] = prefix
        cursor = validate_cursor(last)
        if cursor is not None:
            params["last"] = cursor
        payload = self.transport.send("GET", "/files", params=params)
        return parse_drive_page(payload)

    def iter_pages(self, prefix: Optional[str] = None,
                   limit: Optional[int] = None) -> Iterable[QueryPage]:
        return iterate_pages(lambda cursor: self.list(prefix, limit, cursor), operation="drive_list")

    def list_all(self, prefix: Optional[str] = None, limit: Optional[int] = None) -> List[str]:
        """Every file name, following the cursor to the end."""
        if limit is not None:
            validate_limit(limit)
        return collect_items(lambda cursor: self.list(prefix, limit, cursor), operation="drive_list")

    def get(self, name: str) -> bytes:
        """Download a file."""
        return self.transport.download("/files/download", params={"name": _validate_name(name)})

    def put(self, name: str, data: Union[bytes, bytearray, memoryview]) -> Any:
        """Upload ``data`` as ``name``.

        Payloads up to the chunk size go in one request, larger ones
        through a chunked upload that is aborted if any part fails.
        """
        _validate_name(name)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise BuilderValidationError(f"File data must be bytes, got {type(data).__name__}")
        data = bytes(data)

        if len(data) <= self.chunk_size:
            result = self.transport.send("POST", "/files", params={"name": name},
                                         content=data, headers=OCTET_STREAM)
            logger.info("drive_put", drive=self.name, size=len(data), chunked=False)
            return result
        return self._chunked_put(name, data)

    def _chunked_put(self, name: str, data: bytes) -> Any:
        with log_operation(COMPONENT_DRIVE, "drive_chunked_upload", drive=self.name, size=len(data)):
            init = self.transport.send("POST", "/uploads", params={"name": name})
            if not isinstance(init, dict) or not isinstance(init.get("upload_id"), str):
                raise TransportError(f"Upload for {name!r} did not return an upload_id",
                                     body=init, method="POST", path="/uploads")
            upload_id = init["upload_id"]
            name = init.get("name") or name
            upload_path = f"/uploads/{upload_id}"

            try:
                for part, offset in enumerate(range(0, len(data), self.chunk_size), start=1):
                    self.transport.send("POST", f"{upload_path}/parts",
                                        params={"name": name, "part": part},
                                        content=data[offset:offset + self.chunk_size],
                                        headers=OCTET_STREAM)
                    logger.debug("drive_part_uploaded", drive=self.name, part=part)
                return self.transport.send("PATCH", upload_path, params={"name": name})
            except DetaError as e:
                logger.warning("drive_upload_failed",
                               drive=self.name,
                               upload_id=upload_id,
                               error=str(e),
                               error_type=type(e).__name__)
                self._abort_upload(upload_path, name, upload_id)
                raise

    def _abort_upload(self, upload_path: str, name: str, upload_id: str) -> None:
        """Cancel an upload; a failed abort never masks the original error."""
        try:
            self.transport.send("DELETE", upload_path, params={"name": name})
        except DetaError as e:
            logger.error("drive_upload_abort_failed",
                         drive=self.name,
                         upload_id=upload_id,
                         error=str(e),
                         error_type=type(e).__name__)
            return
        logger.info("drive_upload_aborted", drive=self.name, upload_id=upload_id)

    def delete(self, names: Union[str, Iterable[str]]) -> Any:
        """Delete up to 1000 files in one request."""
        if isinstance(names, str):
            names = [names]
        names = [_validate_name(n) for n in names]
        if not names:
            raise BuilderValidationError("delete() needs at least one file name")
        if len(names) > MAX_DELETE_FILES:
            raise BuilderValidationError(
                f"delete() accepts at most {MAX_DELETE_FILES} names, got {len(names)}")
        result = self.transport.send("DELETE", "/files", {"names": names})
        logger.info("drive_delete", drive=self.name, files=len(names))
        return result
