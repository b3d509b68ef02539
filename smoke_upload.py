#!/usr/bin/env python3
"""
Quick smoke check against a deployed stack: upload an image and wait for the clean/ result
"""

import os
import sys
import time

import boto3
from botocore.exceptions import ClientError

from config.constants import INPUT_PREFIX, OUTPUT_PREFIX, OUTPUT_EXTENSION

s3 = boto3.client('s3')


def upload_and_wait(bucket, image_path, timeout=120, interval=5):
    """Upload image_path under the input prefix and poll for its output"""
    file_name = os.path.basename(image_path)
    source_key = f"{INPUT_PREFIX}{file_name}"
    output_key = f"{OUTPUT_PREFIX}{os.path.splitext(file_name)[0]}{OUTPUT_EXTENSION}"

    print(f"\nUploading {image_path} -> s3://{bucket}/{source_key}")
    s3.upload_file(image_path, bucket, source_key)

    print(f"Waiting for s3://{bucket}/{output_key}")
    print("-" * 60)

    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            response = s3.head_object(Bucket=bucket, Key=output_key)
        except ClientError as e:
            if e.response['Error']['Code'] not in ('404', 'NoSuchKey'):
                raise
            time.sleep(interval)
            continue

        print(f"Output found ({response['ContentLength']} bytes, {response['ContentType']})")
        print(f"Metadata: {response['Metadata']}")
        return response

    print(f"No output after {timeout}s - check the function logs")
    return None


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: smoke_upload.py <bucket> <image>")
        sys.exit(1)

    result = upload_and_wait(sys.argv[1], sys.argv[2])
    sys.exit(0 if result else 1)
