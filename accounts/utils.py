import logging

import boto3
from botocore.exceptions import BotoCoreError
from django.conf import settings

logger = logging.getLogger("quiz_platform")


def get_ses_client():
    """SES client for AWS_REGION. Development signs with the configured keys, elsewhere the instance role."""
    options = {"region_name": settings.AWS_REGION}
    if settings.DJANGO_ENV == "DEVELOPMENT" and settings.AWS_ACCESS_KEY:
        options["aws_access_key_id"] = settings.AWS_ACCESS_KEY
        options["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY

    try:
        return boto3.client("ses", **options)
    except BotoCoreError as e:
        logger.error(f"Failed to create the SES client in {settings.AWS_REGION}: {e}")
        return None
