"""
Remove-BG Stack - S3-triggered background removal

This stack creates:
- S3 bucket holding remove-bg/ inputs and clean/ outputs
- Lambda layer with requests
- Remove background Lambda function
- S3 event trigger on the remove-bg/ prefix

Before deploying, install the layer contents (the asset otherwise holds only
requirements.txt and the function fails to import requests):

    pip install -r lambda/layers/requests/requirements.txt -t lambda/layers/requests/python
"""

from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    CfnOutput,
    aws_s3 as s3,
    aws_lambda as lambda_,
    aws_iam as iam,
    aws_s3_notifications as s3n,
    aws_logs as logs,
)
from constructs import Construct
import json
import os

from config.constants import API_KEY_ENV_VAR, INPUT_PREFIX


class RemoveBgStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Load configuration
        config = self._load_config()

        # Create S3 bucket for source and processed images
        self.image_bucket = s3.Bucket(
            self,
            "ImageBucket",
            bucket_name=config["buckets"]["image_bucket"],
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            versioned=False,
        )

        lambda_role = self._create_lambda_role()

        self.remove_bg_lambda = self._create_remove_bg_lambda(lambda_role, config)

        self._setup_s3_trigger()

        CfnOutput(
            self,
            "ImageBucketName",
            value=self.image_bucket.bucket_name,
            description=f"Upload images under {INPUT_PREFIX} to remove their background",
        )

    def _load_config(self) -> dict:
        """Load config/<environment>.json selected by CDK context (default: dev)"""
        env = self.node.try_get_context("environment") or "dev"
        config_path = f"config/{env}.json"

        with open(config_path, "r") as f:
            return json.load(f)

    def _get_api_key(self) -> str:
        """PhotoRoom key from CDK context, else from the deploying shell"""
        api_key = self.node.try_get_context("photoroom_api_key") or os.environ.get(API_KEY_ENV_VAR)
        if not api_key:
            raise ValueError(
                f"PhotoRoom API key missing: pass -c photoroom_api_key=... or set {API_KEY_ENV_VAR}"
            )
        return api_key

    def _create_lambda_role(self) -> iam.Role:
        """Create IAM role with read/write access to the image bucket"""
        role = iam.Role(
            self,
            "RemoveBgLambdaRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ],
        )

        role.add_to_policy(
            iam.PolicyStatement(
                actions=[
                    "s3:GetObject",
                    "s3:PutObject",
                ],
                resources=[
                    f"{self.image_bucket.bucket_arn}/*",
                ],
            )
        )

        return role

    def _create_remove_bg_lambda(
        self, role: iam.Role, config: dict
    ) -> lambda_.Function:
        """Create the Remove Background Lambda"""

        # Layer built with: pip install -r requirements.txt -t lambda/layers/requests/python
        requests_layer = lambda_.LayerVersion(
            self,
            "RequestsLayer",
            code=lambda_.Code.from_asset("lambda/layers/requests"),
            compatible_runtimes=[lambda_.Runtime.PYTHON_3_11],
            description="requests for PhotoRoom API calls",
        )

        return lambda_.Function(
            self,
            "RemoveBgFunction",
            runtime=lambda_.Runtime.PYTHON_3_11,
            handler="index.handler",
            code=lambda_.Code.from_asset("lambda/remove_bg"),
            layers=[requests_layer],
            role=role,
            timeout=Duration.minutes(config["lambda"]["timeout_minutes"]),
            memory_size=config["lambda"]["memory_size"],
            log_retention=logs.RetentionDays.THREE_DAYS,  # Auto-delete logs after 3 days
            environment={
                API_KEY_ENV_VAR: self._get_api_key(),
            },
        )

    def _setup_s3_trigger(self):
        """Invoke the Lambda for objects created under the input prefix"""
        # Outputs land in clean/, outside the filter, so they never re-trigger
        self.image_bucket.add_event_notification(
            s3.EventType.OBJECT_CREATED,
            s3n.LambdaDestination(self.remove_bg_lambda),
            s3.NotificationKeyFilter(prefix=INPUT_PREFIX),
        )
