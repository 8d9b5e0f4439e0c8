"""S3 storage helpers for agreement PDFs."""

from .keys import build_local_pdf_path, build_location, build_storage_key
from .uploader import AgreementUploader, create_s3_client

__all__ = [
    "AgreementUploader",
    "build_local_pdf_path",
    "build_location",
    "build_storage_key",
    "create_s3_client",
]
