"""Agreement PDF generation stack: SQS -> container Lambda (Chromium) -> S3."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Size,
    Stack,
    aws_cloudwatch as cw,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
    aws_secretsmanager as secretsmanager,
    aws_sqs as sqs,
)
from aws_cdk import aws_lambda_event_sources as lambda_event_sources
from constructs import Construct

REPO_ROOT = Path(__file__).resolve().parents[2]

# Paths never needed inside the function image
_ASSET_EXCLUDES = [
    "cdk.out",
    ".git",
    ".venv",
    "tests",
    "infrastructure",
    "**/__pycache__",
    "*.md",
]


class AgreementPdfStack(Stack):
    """Queue-driven PDF renderer for accepted agreements."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        config: dict,
        code: Optional[lambda_.DockerImageCode] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = environment
        self.config = config

        self.jwt_secret = self._lookup_jwt_secret()
        self.bucket = self._create_bucket()
        self.dlq, self.queue = self._create_queues()
        self.pdf_function = self._create_function(code or self._image_code())

        self.bucket.grant_put(self.pdf_function)
        self.dlq.grant_send_messages(self.pdf_function)
        if self.jwt_secret is not None:
            self.jwt_secret.grant_read(self.pdf_function)

        self._create_alarms()
        self._create_outputs()

    def _lookup_jwt_secret(self) -> Optional[secretsmanager.ISecret]:
        secret_name = self.config.get("jwt_secret_name")
        if not secret_name:
            return None
        return secretsmanager.Secret.from_secret_name_v2(self, "AgreementsJwtSecret", str(secret_name))

    def _create_bucket(self) -> s3.Bucket:
        """Create the encrypted, private bucket that holds generated PDFs."""
        removal_policy = self._removal_policy()
        bucket_name = self.config.get("bucket_name") or None
        return s3.Bucket(
            self,
            "AgreementPdfBucket",
            bucket_name=bucket_name,
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            versioned=True,
            removal_policy=removal_policy,
            auto_delete_objects=bool(self.config.get("auto_delete_objects", False))
            and removal_policy == RemovalPolicy.DESTROY,
        )

    def _create_queues(self) -> tuple[sqs.Queue, sqs.Queue]:
        """Create SQS DLQ and the agreement events queue."""
        dlq = sqs.Queue(
            self,
            "AgreementPdfDlq",
            queue_name=f"{self.env_name}-agreement-pdf-dlq",
            retention_period=Duration.days(14),
            enforce_ssl=True,
        )

        # Visibility timeout aligned with function timeout
        multiplier = int(self.config.get("visibility_timeout_multiplier", 6))
        visibility = Duration.seconds(self._timeout_seconds() * multiplier)
        queue = sqs.Queue(
            self,
            "AgreementPdfQueue",
            queue_name=str(self.config.get("queue_name") or f"{self.env_name}-agreement-pdf-queue"),
            visibility_timeout=visibility,
            dead_letter_queue=sqs.DeadLetterQueue(
                max_receive_count=int(self.config.get("max_receive_count", 3)),
                queue=dlq,
            ),
            enforce_ssl=True,
        )
        return dlq, queue

    def _image_code(self) -> lambda_.DockerImageCode:
        directory = str(self.config.get("image_asset_directory") or REPO_ROOT)
        return lambda_.DockerImageCode.from_image_asset(directory, exclude=_ASSET_EXCLUDES)

    def _create_function(self, code: lambda_.DockerImageCode) -> lambda_.DockerImageFunction:
        """Create the renderer Lambda and subscribe it to the queue."""
        reserved_concurrency = self.config.get("reserved_concurrency")
        if reserved_concurrency is not None:
            reserved_concurrency = int(reserved_concurrency)
            if reserved_concurrency <= 0:
                reserved_concurrency = None

        function = lambda_.DockerImageFunction(
            self,
            "AgreementPdfFunction",
            function_name=f"{self.env_name}-agreement-pdf-generator",
            code=code,
            memory_size=int(self.config.get("lambda_memory", 2048)),
            timeout=Duration.seconds(self._timeout_seconds()),
            ephemeral_storage_size=self._ephemeral_storage(),
            log_retention=self._log_retention(),
            tracing=lambda_.Tracing.ACTIVE if self.config.get("enable_xray_tracing") else lambda_.Tracing.DISABLED,
            reserved_concurrent_executions=reserved_concurrency,
            environment=self._function_environment(),
        )

        function.add_event_source(
            lambda_event_sources.SqsEventSource(
                self.queue,
                batch_size=int(self.config.get("sqs_batch_size", 1)),
                max_batching_window=self._batching_window(),
                report_batch_item_failures=True,
            )
        )
        return function

    def _function_environment(self) -> dict[str, str]:
        retention = dict(self.config.get("retention") or {})
        env_vars: dict[str, str] = {
            "ENVIRONMENT": self.env_name,
            "S3_BUCKET": self.bucket.bucket_name,
            "DEAD_LETTER_QUEUE_URL": self.dlq.queue_url,
            "PDF_TMP_FOLDER": "/tmp/agreements-pdf",
            "ALLOWED_DOMAINS": ",".join(self.config.get("allowed_domains") or []),
            "AUTH_TOKEN_TTL_SECONDS": str(int(self.config.get("auth_token_ttl_seconds", 300))),
            "NAVIGATION_TIMEOUT_MS": str(int(self.config.get("navigation_timeout_ms", 30000))),
            "FILES_S3_SHORT_TERM_PREFIX": str(retention.get("short_term_prefix", "agreements_10")),
            "FILES_S3_MEDIUM_TERM_PREFIX": str(retention.get("medium_term_prefix", "agreements_15")),
            "FILES_S3_LONG_TERM_PREFIX": str(retention.get("long_term_prefix", "agreements_20")),
            "RETENTION_BASE_YEARS": str(int(retention.get("base_years", 7))),
            "RETENTION_SHORT_TERM_MAX_YEARS": str(int(retention.get("short_term_max_years", 10))),
            "RETENTION_MEDIUM_TERM_MAX_YEARS": str(int(retention.get("medium_term_max_years", 15))),
            "LOG_LEVEL": str(self.config.get("log_level", "INFO")),
        }

        # Only the ARN is exposed; the function reads the value at cold start
        if self.jwt_secret is not None:
            env_vars["AGREEMENTS_JWT_SECRET_ARN"] = self.jwt_secret.secret_arn
        return env_vars

    def _timeout_seconds(self) -> int:
        return int(self.config.get("lambda_timeout", 60))

    def _ephemeral_storage(self) -> Size:
        return Size.mebibytes(int(self.config.get("lambda_ephemeral_storage_mb", 512)))

    def _batching_window(self) -> Optional[Duration]:
        seconds = int(self.config.get("sqs_max_batching_window_seconds", 0))
        return Duration.seconds(seconds) if seconds > 0 else None

    def _removal_policy(self) -> RemovalPolicy:
        if str(self.config.get("removal_policy", "retain")).lower() == "destroy":
            return RemovalPolicy.DESTROY
        return RemovalPolicy.RETAIN

    def _log_retention(self) -> logs.RetentionDays:
        """Map integer days from config to CloudWatch Logs retention enum."""
        retention_map = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            5: logs.RetentionDays.FIVE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            90: logs.RetentionDays.THREE_MONTHS,
        }
        return retention_map.get(self.config.get("log_retention_days", 14), logs.RetentionDays.TWO_WEEKS)

    def _create_alarms(self) -> None:
        # Anything on the DLQ needs a human
        dlq_depth = self.dlq.metric_approximate_number_of_messages_visible(
            period=Duration.minutes(5),
            statistic="Maximum",
        )
        cw.Alarm(
            self,
            "AgreementPdfDlqAlarm",
            alarm_description="Agreement PDF messages dead-lettered",
            metric=dlq_depth,
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
        )

        age_metric = self.queue.metric_approximate_age_of_oldest_message(period=Duration.minutes(5))
        cw.Alarm(
            self,
            "AgreementPdfQueueAgeAlarm",
            alarm_description="Old messages in agreement PDF queue",
            metric=age_metric,
            threshold=float(self.config.get("alarm_queue_age_seconds", 900.0)),
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
        )

        cw.Alarm(
            self,
            "AgreementPdfErrorsAlarm",
            alarm_description="Agreement PDF generator errors detected",
            metric=self.pdf_function.metric_errors(period=Duration.minutes(5)),
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
        )

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "AgreementPdfFunctionArn",
            value=self.pdf_function.function_arn,
            description="Agreement PDF generator function ARN",
        )
        CfnOutput(
            self,
            "AgreementPdfQueueUrl",
            value=self.queue.queue_url,
            description="Agreement events SQS queue URL",
        )
        CfnOutput(
            self,
            "AgreementPdfDlqUrl",
            value=self.dlq.queue_url,
            description="Agreement PDF dead-letter queue URL",
        )
        CfnOutput(
            self,
            "AgreementPdfBucketName",
            value=self.bucket.bucket_name,
            description="Agreement PDF bucket name",
        )
