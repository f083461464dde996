"""S3 service for the object store side of an upload run."""

import time
from pathlib import Path
from typing import Any

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from mypy_boto3_s3 import S3Client

from recent_upload.config import Credentials


def create_s3_client(
    credentials: Credentials,
    region: str = "us-east-1",
    endpoint_url: str = "",
    max_pool_connections: int = 10,
) -> S3Client:
    """Create an S3 client from an explicit access key pair.

    Args:
        credentials: Access key id and secret
        region: AWS region (default: us-east-1)
        endpoint_url: Optional non-AWS endpoint, empty for the AWS default
        max_pool_connections: HTTP connection pool size, at least the worker count

    Returns:
        Configured S3 client
    """
    session = boto3.Session(
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        region_name=region,
    )
    client: S3Client = session.client(
        "s3",
        endpoint_url=endpoint_url or None,
        config=BotoConfig(max_pool_connections=max_pool_connections),
    )
    return client


def upload_file(
    client: S3Client,
    path: str | Path,
    bucket: str,
    key: str,
) -> dict[str, Any]:
    """Upload a file to S3, blocking until the transfer completes or fails.

    Args:
        client: S3 client
        path: Local file path
        bucket: S3 bucket name
        key: S3 object key

    Returns:
        Dictionary with upload result information
    """
    size = 0
    started = time.monotonic()
    try:
        size = Path(path).stat().st_size
        client.upload_file(Filename=str(path), Bucket=bucket, Key=key)
        return {
            "success": True,
            "bucket": bucket,
            "key": key,
            "size": size,
            "duration_seconds": round(time.monotonic() - started, 3),
            "error": None,
        }
    except (ClientError, BotoCoreError, S3UploadFailedError, OSError) as e:
        return {
            "success": False,
            "bucket": bucket,
            "key": key,
            "size": size,
            "duration_seconds": round(time.monotonic() - started, 3),
            "error": str(e),
        }


class BucketUploader:
    """Binds a client to one bucket, exposing ``(key, path) -> result``."""

    def __init__(self, client: S3Client, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def __call__(self, key: str, path: str | Path) -> dict[str, Any]:
        return upload_file(self.client, path, self.bucket, key)


def validate_bucket_access(client: S3Client, bucket: str) -> dict[str, Any]:
    """Validate that we can access the specified S3 bucket.

    Args:
        client: S3 client
        bucket: S3 bucket name

    Returns:
        Dictionary with validation result
    """
    try:
        client.head_bucket(Bucket=bucket)
        return {
            "success": True,
            "bucket": bucket,
            "error": None,
        }
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        if error_code == "404":
            error_msg = f"Bucket '{bucket}' does not exist"
        elif error_code == "403":
            error_msg = f"Access denied to bucket '{bucket}'"
        else:
            error_msg = str(e)
        return {
            "success": False,
            "bucket": bucket,
            "error": error_msg,
        }
    except NoCredentialsError:
        return {
            "success": False,
            "bucket": bucket,
            "error": "AWS credentials not found",
        }
    except BotoCoreError as e:
        return {
            "success": False,
            "bucket": bucket,
            "error": str(e),
        }
