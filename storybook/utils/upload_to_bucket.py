import logging
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storybook.utils.settings import Settings

logger = logging.getLogger(__name__)


def build_s3_client(settings: Settings):
    """Create the S3 client used to mirror generated images"""
    return boto3.client(
        's3',
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        region_name=settings.s3_region,
    )


def upload_file_object_to_s3(s3_client, file_object, bucket_name: str, object_name: str, region: str) -> dict:
    """
    Upload a file-like object to an S3 bucket with public read access

    Args:
        s3_client: boto3 S3 client
        file_object: File-like object to upload
        bucket_name (str): Name of the S3 bucket
        object_name (str): S3 object name
        region (str): Bucket region, used to build the public URL

    Returns:
        dict: Dictionary containing success status, file URL, and message
    """
    try:
        s3_client.upload_fileobj(
            file_object,
            bucket_name,
            object_name,
            ExtraArgs={
                'ACL': 'public-read',
                'ContentType': get_content_type(object_name)
            }
        )

        file_url = f"https://{bucket_name}.s3.{region}.amazonaws.com/{object_name}"
        logger.info(f"File object uploaded successfully: {file_url}")

        return {
            'success': True,
            'url': file_url,
            'message': 'File uploaded successfully'
        }

    except ClientError as e:
        error_message = f"Failed to upload file object: {str(e)}"
        logger.error(error_message)
        return {
            'success': False,
            'url': None,
            'message': error_message
        }
    except BotoCoreError as e:
        error_message = f"S3 is unreachable or misconfigured: {str(e)}"
        logger.error(error_message)
        return {
            'success': False,
            'url': None,
            'message': error_message
        }
    except Exception as e:
        error_message = f"An unexpected error occurred: {str(e)}"
        logger.error(error_message)
        return {
            'success': False,
            'url': None,
            'message': error_message
        }


def get_content_type(file_path: str) -> str:
    """Determine the content type based on file extension"""
    extension = os.path.splitext(file_path)[1].lower()

    content_types = {
        '.jpg': 'image/jpeg',
        '.jpeg': 'image/jpeg',
        '.png': 'image/png',
        '.gif': 'image/gif',
        '.webp': 'image/webp',
    }

    return content_types.get(extension, 'application/octet-stream')
