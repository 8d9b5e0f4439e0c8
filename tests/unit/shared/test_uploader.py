import logging
from datetime import datetime, timezone

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from agreements_pdf.errors import UploadError
from agreements_pdf.models.settings import AgreementPdfSettings
from agreements_pdf.storage.uploader import AgreementUploader

BUCKET = "agreements-pdf-test"
NOW = datetime(2025, 1, 15, tzinfo=timezone.utc)


def _pdf(tmp_path, name: str = "SFI123-1-abc.pdf"):
    path = tmp_path / name
    path.write_bytes(b"%PDF-1.4 test")
    return path


@mock_aws
def test_upload_puts_encrypted_pdf_under_retention_prefix(tmp_path, make_bucket) -> None:
    """
    Given: moto S3 버킷과 로컬 PDF
    When: 종료일 2028-02-01 합의서 업로드 (처리 시각 2025-01-15)
    Then: agreements_10/{번호}/{버전}/{파일명} 키, AES256 암호화, application/pdf, 로컬 파일 삭제
    """
    make_bucket(BUCKET)
    local = _pdf(tmp_path)
    uploader = AgreementUploader(BUCKET, clock=lambda: NOW)

    result = uploader.upload(str(local), "SFI123-1.pdf", "SFI123", 1, "2028-02-01")

    assert result.success is True
    assert result.key == "agreements_10/SFI123/1/SFI123-1.pdf"
    assert result.location == f"s3://{BUCKET}/agreements_10/SFI123/1/SFI123-1.pdf"
    assert result.etag

    s3 = boto3.client("s3", region_name="us-east-1")
    head = s3.head_object(Bucket=BUCKET, Key=result.key)
    assert head["ContentType"] == "application/pdf"
    assert head["ServerSideEncryption"] == "AES256"
    assert s3.get_object(Bucket=BUCKET, Key=result.key)["Body"].read() == b"%PDF-1.4 test"
    assert not local.exists()


@mock_aws
def test_unknown_end_date_goes_to_longest_tier(tmp_path, make_bucket) -> None:
    make_bucket(BUCKET)
    result = AgreementUploader(BUCKET, clock=lambda: NOW).upload(str(_pdf(tmp_path)), "A-2.pdf", "A", 2, None)
    assert result.key == "agreements_20/A/2/A-2.pdf"


@mock_aws
def test_missing_bucket_raises_and_still_cleans_up(tmp_path, caplog) -> None:
    """
    Given: 존재하지 않는 버킷
    When: 업로드
    Then: UploadError 전파, 오류 로그, 로컬 파일은 삭제
    """
    local = _pdf(tmp_path)
    uploader = AgreementUploader("does-not-exist", clock=lambda: NOW)

    with caplog.at_level(logging.ERROR):
        with pytest.raises(UploadError) as exc_info:
            uploader.upload(str(local), "SFI123-1.pdf", "SFI123", 1, "2030-01-01")

    assert isinstance(exc_info.value.__cause__, ClientError)
    assert "Error uploading PDF SFI123-1.pdf to S3" in caplog.text
    assert not local.exists()


def test_unconfigured_bucket_is_upload_error(tmp_path) -> None:
    """
    Given: 버킷 이름 미설정
    When: 업로드
    Then: S3 호출 없이 UploadError, 로컬 파일 삭제
    """
    local = _pdf(tmp_path)
    uploader = AgreementUploader(None, s3_client=object())
    with pytest.raises(UploadError, match="not configured"):
        uploader.upload(str(local), "a.pdf", "A", 1)
    assert not local.exists()


def test_cleanup_failure_does_not_mask_success(tmp_path, caplog) -> None:
    """
    Given: 업로드 성공 후 로컬 파일이 이미 사라진 상황
    When: 업로드 완료
    Then: 결과 정상 반환, 정리 실패는 경고 로그만
    """

    class _S3:
        def put_object(self, **kwargs):
            local.unlink()
            return {"ETag": '"etag-1"'}

    local = _pdf(tmp_path)
    uploader = AgreementUploader(BUCKET, s3_client=_S3(), clock=lambda: NOW)
    with caplog.at_level(logging.WARNING):
        result = uploader.upload(str(local), "a.pdf", "A", 1, "2026-01-01")

    assert result.etag == '"etag-1"'
    assert "Failed to cleanup local PDF file" in caplog.text


def test_from_settings_uses_retention_policy() -> None:
    settings = AgreementPdfSettings.load(
        {"S3_BUCKET": "b", "FILES_S3_LONG_TERM_PREFIX": "forever", "S3_ENDPOINT": "http://localhost:4566"}
    )
    uploader = AgreementUploader.from_settings(settings, clock=lambda: NOW)
    assert uploader.bucket == "b"
    assert uploader.build_key("A-1.pdf", "A", 1, None) == "forever/A/1/A-1.pdf"
    assert uploader.s3.meta.endpoint_url == "http://localhost:4566"
