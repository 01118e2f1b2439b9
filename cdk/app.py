#!/usr/bin/env python3
"""
Token Injectable Docker Builder CDK App
Entry point for the integration stack
"""

import os
import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks
from nag_suppressions import apply_common_suppressions
from token_injectable_docker_builder.integ_stack import IntegStack

app = cdk.App()

# Get environment from CDK context or environment variables
account = app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT")
region = app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION") or "us-east-1"

source_path = app.node.try_get_context("sourcePath") or os.path.join(os.path.dirname(__file__), "test-docker")
docker_login_secret_arn = app.node.try_get_context("dockerLoginSecretArn") or os.environ.get("DOCKER_LOGIN_SECRET_ARN")

integ_stack = IntegStack(
    app,
    "IntegTestingStack",
    source_path=source_path,
    docker_login_secret_arn=docker_login_secret_arn,
    description="Token Injectable Docker Builder - Integration Stack",
    env=cdk.Environment(account=account, region=region)
)

apply_common_suppressions(integ_stack)

# Add cdk-nag checks (unless explicitly skipped)
if not os.environ.get("CDK_NAG_SKIP"):
    cdk.Aspects.of(app).add(AwsSolutionsChecks(verbose=True))

app.synth()
