"""Upload rendered agreement PDFs to S3 and clean up the local copy."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Union

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from agreements_pdf.errors import UploadError
from agreements_pdf.models.outcomes import UploadResult
from agreements_pdf.models.settings import AgreementPdfSettings, RetentionPolicy
from agreements_pdf.retention import calculate_retention_period
from agreements_pdf.storage.keys import build_location, build_storage_key
from agreements_pdf.utils.files import remove_temporary_file
from agreements_pdf.utils.logger import get_logger

Log = Union[logging.Logger, logging.LoggerAdapter]

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
SERVER_SIDE_ENCRYPTION = "AES256"


def create_s3_client(region: Optional[str] = None, endpoint_url: Optional[str] = None) -> Any:
    """Return an S3 client; an explicit endpoint (LocalStack) forces path-style addressing."""
    if endpoint_url:
        return boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            config=Config(s3={"addressing_style": "path"}),
        )
    return boto3.client("s3", region_name=region)


class AgreementUploader:
    """Stores agreement PDFs under a retention-tier prefix."""

    def __init__(
        self,
        bucket: Optional[str],
        retention: Optional[RetentionPolicy] = None,
        *,
        s3_client: Any = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        log: Optional[Log] = None,
    ) -> None:
        self.bucket = bucket
        self.retention = retention or RetentionPolicy()
        self._s3 = s3_client
        self._region = region
        self._endpoint_url = endpoint_url
        self._clock = clock
        self.log = log or logger

    @classmethod
    def from_settings(cls, settings: AgreementPdfSettings, **kwargs: Any) -> "AgreementUploader":
        return cls(
            settings.bucket,
            settings.retention,
            region=settings.region,
            endpoint_url=settings.s3_endpoint,
            **kwargs,
        )

    @property
    def s3(self) -> Any:
        if self._s3 is None:
            self._s3 = create_s3_client(self._region, self._endpoint_url)
        return self._s3

    def build_key(self, filename: str, agreement_number: Any, version: Any, end_date: Any) -> str:
        now = self._clock() if self._clock else None
        prefix = calculate_retention_period(end_date, self.retention, now=now)
        return build_storage_key(
            prefix=prefix,
            agreement_number=agreement_number,
            version=version,
            filename=filename,
        )

    def put_pdf(self, local_path: str, key: str) -> UploadResult:
        """Read ``local_path`` and put it at ``key``. Does not touch the local file."""
        self.log.info(
            f"Starting PDF upload to S3. key: {key}, filepath: {local_path}",
            extra={"key": key, "output_path": local_path},
        )
        if not self.bucket:
            raise UploadError("S3 bucket name is not configured")

        with open(local_path, "rb") as fh:
            body = fh.read()

        try:
            response = self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=PDF_CONTENT_TYPE,
                ServerSideEncryption=SERVER_SIDE_ENCRYPTION,
            )
        except (ClientError, BotoCoreError) as exc:
            raise UploadError(f"S3 put_object failed for s3://{self.bucket}/{key}: {exc}") from exc

        etag = response.get("ETag")
        location = build_location(self.bucket, key)
        self.log.info(
            f"PDF successfully uploaded to S3. key: {key}, etag: {etag}, location: {location}",
            extra={"bucket": self.bucket, "key": key},
        )
        return UploadResult(success=True, bucket=self.bucket, key=key, etag=etag, location=location)

    def upload(
        self,
        local_path: str,
        filename: str,
        agreement_number: Any,
        version: Any,
        end_date: Any = None,
    ) -> UploadResult:
        """Upload the rendered PDF and always remove the local file afterwards.

        Upload errors are logged and re-raised; cleanup errors are only logged.
        """
        context = {"agreement_number": agreement_number, "version": version, "pdf_filename": filename}
        try:
            key = self.build_key(filename, agreement_number, version, end_date)
            return self.put_pdf(local_path, key)
        except Exception as exc:
            self.log.error(
                f"Error uploading PDF {filename} to S3: {exc}",
                extra={**context, "error": str(exc)},
            )
            raise
        finally:
            remove_temporary_file(local_path, self.log)
