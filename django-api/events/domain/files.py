"""Allow-list policy for promo material uploads."""

from collections.abc import Iterable

from events.domain.commands import FileUpload
from events.domain.errors import ValidationError

MAX_FILE_SIZE = 50 * 1024 * 1024

# MIME type -> accepted filename extensions
MIME_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
    "video/mp4": ("mp4",),
    "video/mov": ("mov",),
    "video/avi": ("avi",),
    "video/quicktime": ("mov", "qt"),
    "application/pdf": ("pdf",),
}

ALLOWED_MIME_TYPES = frozenset(MIME_EXTENSIONS)


def file_extension(file_name: str) -> str:
    _, dot, extension = file_name.rpartition(".")
    return extension.lower() if dot else ""


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{round(size / 1024)} KB"
    return f"{round(size / (1024 * 1024))} MB"


def check_file(upload: FileUpload, max_size: int = MAX_FILE_SIZE) -> str | None:
    """Return a description of what is wrong with ``upload``, or None."""
    if upload.size < 0:
        return "File size must be a positive number"
    if upload.size > max_size:
        return (
            f"File size {format_file_size(upload.size)} exceeds maximum "
            f"allowed size of {format_file_size(max_size)}"
        )

    mime_type = upload.mime_type.strip().lower()
    if "/" not in mime_type:
        return "Invalid MIME type format"
    if mime_type not in ALLOWED_MIME_TYPES:
        allowed = ", ".join(sorted(ALLOWED_MIME_TYPES))
        return f"File type {upload.mime_type} is not allowed. Allowed types: {allowed}"

    extension = file_extension(upload.file_name)
    expected = MIME_EXTENSIONS[mime_type]
    if extension not in expected:
        return (
            f"File extension '{extension}' does not match MIME type "
            f"'{upload.mime_type}'. Expected: {', '.join(expected)}"
        )
    return None


def validate_files(uploads: Iterable[FileUpload], max_size: int = MAX_FILE_SIZE) -> None:
    """Raise ValidationError naming the first file that breaks the policy."""
    for upload in uploads:
        if not upload.file_name.strip():
            raise ValidationError("File name cannot be empty", field="files")
        if not upload.storage_ref.strip():
            raise ValidationError(
                f'File "{upload.file_name}": storage reference is missing', field="files"
            )
        problem = check_file(upload, max_size)
        if problem:
            raise ValidationError(f'File "{upload.file_name}": {problem}', field="files")
