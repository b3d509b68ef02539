"""
Lambda: Remove Background

Triggered by S3 ObjectCreated events on the remove-bg/ prefix.
- Filters keys outside remove-bg/ or with unsupported extensions
- Reads the source image from S3
- Sends it to PhotoRoom to replace the background with white
- Writes the PNG result to clean/ with metadata pointing back to the source
"""

import json
import os
import boto3
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Tuple
from urllib.parse import unquote_plus

from photoroom import PhotoRoomClient

# Initialize clients
s3_client = boto3.client('s3')

# Environment variables
PHOTOROOM_API_KEY = os.environ['PHOTOROOM_API_KEY']

photoroom_client = PhotoRoomClient(api_key=PHOTOROOM_API_KEY)

# Pipeline constants
INPUT_PREFIX = 'remove-bg/'
OUTPUT_PREFIX = 'clean/'
SUPPORTED_EXTENSIONS = ['.jpg', '.jpeg', '.png']
OUTPUT_EXTENSION = '.png'
OUTPUT_CONTENT_TYPE = 'image/png'
PROCESSOR_ID = 'lambda-remove-background'


def handler(event, context):
    """
    Main handler for Remove Background Lambda

    Args:
        event: S3 notification with a list of Records
        context: Lambda context

    Returns:
        Dict with statusCode 200 once every record has been handled.
        Any failure is re-raised so Lambda marks the invocation failed.
    """
    print("Starting background removal")
    print(f"Received event: {json.dumps(event, indent=2)}")

    try:
        # Records are handled in delivery order; the first error stops the batch
        for record in event.get('Records', []):
            process_s3_record(record)

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Processing completed successfully'
            })
        }

    except Exception as e:
        print(f"Error processing event: {str(e)}")
        raise


def process_s3_record(record: Dict[str, Any]) -> Optional[str]:
    """
    Run one notification record through filter, fetch, transform and store

    Returns:
        Output key that was written, or None if the record was skipped
    """
    bucket, key = parse_record(record)
    print(f"Processing file: {key} in bucket: {bucket}")

    if not should_process(key):
        return None

    extension = os.path.splitext(key)[1].lower()
    output_key = derive_output_key(key)
    print(f"Processing: {key} -> {output_key}")

    image_data = fetch_image(bucket, key)

    print("Calling PhotoRoom to remove background with white fill...")
    processed_data = photoroom_client.remove_background(
        image_data, os.path.basename(key), extension
    )
    print(f"Image processed successfully ({len(processed_data)} bytes)")

    store_result(bucket, output_key, processed_data, key)

    print(f"Finished processing: {key} -> {output_key}")
    return output_key


def parse_record(record: Dict[str, Any]) -> Tuple[str, str]:
    """
    Extract bucket name and decoded object key from an S3 event record

    S3 URL-encodes keys in notifications and encodes spaces as '+'.
    """
    bucket = record['s3']['bucket']['name']
    key = unquote_plus(record['s3']['object']['key'])
    return bucket, key


def should_process(key: str) -> bool:
    """Check that the key is under the input prefix with a supported extension"""
    if not key.startswith(INPUT_PREFIX):
        print(f"Skipping file - not under {INPUT_PREFIX}")
        return False

    extension = os.path.splitext(key)[1].lower()
    if extension not in SUPPORTED_EXTENSIONS:
        print(f"Skipping file - unsupported extension: {extension}")
        return False

    return True


def derive_output_key(key: str) -> str:
    """
    Map a source key to its output key

    remove-bg/photo.JPG -> clean/photo.png
    """
    base_name = os.path.splitext(os.path.basename(key))[0]
    return f"{OUTPUT_PREFIX}{base_name}{OUTPUT_EXTENSION}"


def fetch_image(bucket: str, key: str) -> bytes:
    """
    Read the full source object from S3

    Returns:
        Object body as bytes
    """
    print("Reading file from S3...")
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
        image_data = response['Body'].read()
    except Exception as e:
        print(f"Error reading s3://{bucket}/{key}: {e}")
        raise

    print(f"File read successfully ({len(image_data)} bytes)")
    return image_data


def store_result(bucket: str, output_key: str, image_data: bytes, original_key: str) -> None:
    """
    Write the processed PNG to S3

    Metadata links the result back to its source object.
    """
    print(f"Saving processed image: {output_key}...")
    try:
        s3_client.put_object(
            Bucket=bucket,
            Key=output_key,
            Body=image_data,
            ContentType=OUTPUT_CONTENT_TYPE,
            Metadata={
                'original-file': original_key,
                'processed-by': PROCESSOR_ID,
                'processing-date': processing_timestamp()
            }
        )
    except Exception as e:
        print(f"Error saving s3://{bucket}/{output_key}: {e}")
        raise

    print(f"Image saved successfully: {output_key}")


def processing_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-01-15T10:30:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
