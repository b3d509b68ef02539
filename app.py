#!/usr/bin/env python3
"""
Remove-BG CDK Application

Deploys the S3-triggered Lambda that strips image backgrounds with PhotoRoom.
"""

import aws_cdk as cdk
from lib.remove_bg_stack import RemoveBgStack

app = cdk.App()

# Get environment configuration
env = cdk.Environment(
    account=app.node.try_get_context("account"),
    region=app.node.try_get_context("region") or "us-east-1"
)

RemoveBgStack(
    app,
    "RemoveBgStack",
    env=env,
    description="Remove-BG - PhotoRoom background removal on S3 upload"
)

app.synth()
