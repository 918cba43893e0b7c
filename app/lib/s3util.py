import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from app.lib.logger import logger


class S3Utils:
    """Signs short-lived download urls for objects in the product files bucket."""

    def __init__(self, bucket, region, access_key_id=None, secret_access_key=None):
        self.bucket = bucket
        self.region = region
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self._client = None

    @classmethod
    def from_config(cls, config):
        return cls(
            bucket=config.get("AWS_PRODUCT_BUCKET"),
            region=config.get("AWS_DEFAULT_REGION"),
            access_key_id=config.get("AWS_ACCESS_KEY_ID") or None,
            secret_access_key=config.get("AWS_SECRET_ACCESS_KEY") or None,
        )

    @property
    def client(self):
        if self._client is None:
            session = boto3.session.Session(
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
            )
            self._client = session.client("s3")
        return self._client

    def generate_presigned_url(self, s3_key, expires_in=3600, file_name=None):
        params = {"Bucket": self.bucket, "Key": s3_key}
        if file_name:
            params["ResponseContentDisposition"] = f'attachment; filename="{file_name}"'
        try:
            return self.client.generate_presigned_url(
                "get_object", Params=params, ExpiresIn=expires_in
            )
        except NoCredentialsError:
            logger.error("S3 credentials not found.")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error signing S3 url for {s3_key}: {e}")
        return None
