"""Unit tests for S3 storage client.

Tests cover:
- Collision-free key generation with folder prefix
- PDF upload with inline content disposition
- Download, deletion and connection verification error mapping
- Storage manager singleton
"""

from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from student_power.exceptions import S3ConnectionError, S3OperationError


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestS3Storage:
    """Test suite for S3Storage class."""

    @pytest.fixture
    def mock_boto3_client(self):
        """Create a mock boto3 S3 client."""
        with patch("student_power.utils.s3.boto3.client") as mock_client:
            yield mock_client

    @pytest.fixture
    def s3_storage(self, mock_boto3_client):
        """Create S3Storage instance with mocked client."""
        from student_power.utils.s3 import S3Storage

        mock_boto3_client.return_value = MagicMock()
        return S3Storage(
            endpoint_url="http://localhost:9000/",
            access_key="test-access-key",
            secret_key="test-secret-key",
            bucket_name="test-bucket",
            region="us-east-1",
        )

    def test_init_creates_boto3_client(self, mock_boto3_client):
        """S3Storage creates a boto3 client with the given config."""
        from student_power.utils.s3 import S3Storage

        S3Storage(
            endpoint_url="http://localhost:9000",
            access_key="test-access-key",
            secret_key="test-secret-key",
            bucket_name="test-bucket",
            region="us-east-1",
        )

        mock_boto3_client.assert_called_once_with(
            "s3",
            endpoint_url="http://localhost:9000",
            aws_access_key_id="test-access-key",
            aws_secret_access_key="test-secret-key",
            region_name="us-east-1",
        )

    def test_build_key_is_unique_and_slugified(self, s3_storage):
        """Keys keep the folder, a slugified stem and the extension."""
        first = s3_storage.build_key("Unit 1 Notes.PDF")
        second = s3_storage.build_key("Unit 1 Notes.PDF")

        assert first != second
        assert first.startswith("pdfs/")
        assert first.endswith("__unit-1-notes.pdf")

    def test_build_key_without_usable_stem(self, s3_storage):
        key = s3_storage.build_key("???.pdf", folder="")

        assert "/" not in key
        assert key.endswith("__file.pdf")

    def test_upload_pdf_sets_inline_disposition(self, s3_storage):
        """upload_pdf stores the file so browsers display it inline."""
        stored = s3_storage.upload_pdf(BytesIO(b"%PDF-1.4 data"), 'my "notes".pdf')

        call = s3_storage._client.put_object.call_args.kwargs
        assert call["Bucket"] == "test-bucket"
        assert call["ContentType"] == "application/pdf"
        assert call["ContentDisposition"] == 'inline; filename="my notes.pdf"'
        assert stored.size == len(b"%PDF-1.4 data")
        assert stored.key == call["Key"]
        assert stored.url == f"http://localhost:9000/test-bucket/{stored.key}"

    def test_upload_failure_raises_operation_error(self, s3_storage):
        s3_storage._client.put_object.side_effect = client_error(
            "AccessDenied", "PutObject"
        )

        with pytest.raises(S3OperationError):
            s3_storage.upload_pdf(BytesIO(b"%PDF"), "notes.pdf")

    def test_download_file(self, s3_storage):
        body = MagicMock()
        body.read.return_value = b"%PDF content"
        s3_storage._client.get_object.return_value = {"Body": body}

        assert s3_storage.download_file("pdfs/a.pdf") == b"%PDF content"

    def test_download_missing_file(self, s3_storage):
        s3_storage._client.get_object.side_effect = client_error(
            "NoSuchKey", "GetObject"
        )

        with pytest.raises(S3OperationError, match="File not found"):
            s3_storage.download_file("pdfs/missing.pdf")

    def test_delete_file(self, s3_storage):
        s3_storage.delete_file("pdfs/a.pdf")

        s3_storage._client.delete_object.assert_called_once_with(
            Bucket="test-bucket", Key="pdfs/a.pdf"
        )

    def test_delete_failure_raises_operation_error(self, s3_storage):
        s3_storage._client.delete_object.side_effect = client_error(
            "InternalError", "DeleteObject"
        )

        with pytest.raises(S3OperationError):
            s3_storage.delete_file("pdfs/a.pdf")

    def test_verify_connection_failure(self, s3_storage):
        s3_storage._client.head_bucket.side_effect = client_error(
            "NoSuchBucket", "HeadBucket"
        )

        with pytest.raises(S3ConnectionError):
            s3_storage.verify_connection()


class TestS3Lifecycle:
    """Tests for the storage manager and module-level helpers."""

    @pytest.fixture(autouse=True)
    def reset_manager(self):
        from student_power.utils.s3 import s3_manager

        s3_manager.storage = None
        yield
        s3_manager.storage = None

    def test_get_storage_before_init_raises(self):
        from student_power.utils.s3 import get_s3_storage

        with pytest.raises(S3ConnectionError):
            get_s3_storage()

    def test_init_tolerates_unreachable_bucket(self):
        from student_power.utils.s3 import get_s3_storage, init_s3

        with patch("student_power.utils.s3.boto3.client") as mock_client:
            mock_client.return_value.head_bucket.side_effect = client_error(
                "NoSuchBucket", "HeadBucket"
            )
            init_s3()

        assert get_s3_storage() is not None

    def test_close_drops_storage(self):
        from student_power.utils.s3 import close_s3, s3_manager

        with patch("student_power.utils.s3.boto3.client"):
            s3_manager.init_storage()
        close_s3()

        assert s3_manager.storage is None
