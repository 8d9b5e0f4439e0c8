import os
import sys
from pathlib import Path
from typing import Any, Callable, Iterator
import pytest
import boto3


pytest_plugins = [
    "tests.fixtures.pdf_env",
    "tests.fixtures.playwright_fakes",
]

# Ensure the 'agreements_pdf' layer is importable at collection time (module import stage)
_repo_root = Path(__file__).resolve().parents[1]
# Ensure project root and 'src' are on sys.path for flexible imports
_repo_root_str = str(_repo_root)
_src_path_str = str(_repo_root / "src")
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)
if _src_path_str not in sys.path:
    sys.path.insert(0, _src_path_str)
_layer_path = _repo_root / "src" / "lambda" / "layers" / "common" / "python"
_layer_str = str(_layer_path)
if _layer_str not in sys.path:
    sys.path.insert(0, _layer_str)

HANDLER_PATH = str(_repo_root / "src" / "lambda" / "functions" / "agreement_pdf" / "handler.py")


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure default AWS region is set for moto/boto3 clients and clear cross-test env leaks.

    Also removes generator settings that a developer shell may export so
    unit tests always start from defaults.
    """
    monkeypatch.setenv("AWS_REGION", os.environ.get("AWS_REGION", "us-east-1"))
    monkeypatch.setenv("AWS_DEFAULT_REGION", os.environ.get("AWS_DEFAULT_REGION", "us-east-1"))
    # Provide dummy credentials so botocore signing doesn't fail under moto
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", os.environ.get("AWS_ACCESS_KEY_ID", "testing"))
    monkeypatch.setenv(
        "AWS_SECRET_ACCESS_KEY",
        os.environ.get("AWS_SECRET_ACCESS_KEY", "testing"),
    )
    monkeypatch.setenv("AWS_SESSION_TOKEN", os.environ.get("AWS_SESSION_TOKEN", "testing"))

    for name in (
        "S3_BUCKET",
        "S3_ENDPOINT",
        "ALLOWED_DOMAINS",
        "AGREEMENTS_JWT_SECRET",
        "AGREEMENTS_JWT_SECRET_ARN",
        "DEAD_LETTER_QUEUE_URL",
        "PDF_TMP_FOLDER",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def pythonpath() -> Iterator[None]:
    """Ensure Lambda layer 'agreements_pdf' package is importable in tests.

    Adds src/lambda/layers/common/python to sys.path so that
    `import agreements_pdf.*` used by the Lambda handler works when loading via runpy.
    """
    layer_str = str(_layer_path)
    if layer_str not in sys.path:
        sys.path.insert(0, layer_str)
    yield


@pytest.fixture
def load_module() -> Callable[[str], dict[str, Any]]:
    import runpy

    def _apply(path: str) -> dict[str, Any]:
        return runpy.run_path(path)

    return _apply


@pytest.fixture
def load_handler(load_module) -> Callable[[], dict[str, Any]]:
    """Load the agreement PDF Lambda entry module as a fresh globals dict."""

    def _apply() -> dict[str, Any]:
        return load_module(HANDLER_PATH)

    return _apply


@pytest.fixture
def fake_image_code() -> Callable[[Any], Any]:
    """DockerImageCode that points at an existing ECR repository.

    Avoids staging the repository as a container asset during synth.
    """

    def _apply(scope: Any) -> Any:
        from aws_cdk import aws_ecr as ecr
        from aws_cdk import aws_lambda as lambda_

        repository = ecr.Repository.from_repository_name(scope, "FakeImageRepo", "agreements-pdf")
        return lambda_.DockerImageCode.from_ecr(repository, tag_or_digest="test")

    return _apply


@pytest.fixture
def make_queue() -> Callable[[str], str]:
    def _create(name: str) -> str:
        client = boto3.client("sqs", region_name=os.environ.get("AWS_REGION", "us-east-1"))
        return client.create_queue(QueueName=name)["QueueUrl"]

    return _create


@pytest.fixture
def make_bucket() -> Callable[[str], str]:
    def _create(name: str) -> str:
        client = boto3.client("s3", region_name=os.environ.get("AWS_REGION", "us-east-1"))
        client.create_bucket(Bucket=name)
        return name

    return _create


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers and filtering."""
    rootdir = Path(config.rootdir)

    for item in items:
        rel_path = Path(item.fspath).relative_to(rootdir)

        # Add markers based on file location
        if "unit" in rel_path.parts:
            item.add_marker(pytest.mark.unit)
        if "integration" in rel_path.parts:
            item.add_marker(pytest.mark.integration)
        if "lambda" in rel_path.parts:
            item.add_marker(pytest.mark.lambda_test)
        if "infrastructure" in rel_path.parts:
            item.add_marker(pytest.mark.infrastructure)
