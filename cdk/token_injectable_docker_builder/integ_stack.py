"""
Integration stack exercising the TokenInjectableDockerBuilder end to end
"""

import aws_cdk as cdk
from aws_cdk import (
    CfnParameter,
    CfnOutput,
    aws_lambda as lambda_,
)
from constructs import Construct
from typing import Dict, Optional

from .constructs.token_injectable_docker_builder import TokenInjectableDockerBuilder

SAMPLE_BUILD_ARG_COUNT = 6


class IntegStack(cdk.Stack):
    """
    Builds a sample image with literal and deploy-time build args and runs it as a Lambda function.
    """

    def __init__(self, scope: Construct, construct_id: str,
                 source_path: str,
                 docker_login_secret_arn: Optional[str] = None,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Create CDK parameters
        self._create_parameters()

        self.builder = TokenInjectableDockerBuilder(
            self, "Builder",
            path=source_path,
            build_args=self._sample_build_args(),
            docker_login_secret_arn=docker_login_secret_arn
        )

        # Consume the built image
        self.image_function = lambda_.DockerImageFunction(
            self, "ImageFunction",
            code=self.builder.docker_image_code,
            timeout=cdk.Duration.seconds(30)
        )

        # Create stack outputs
        self._create_outputs()

    def _create_parameters(self) -> None:
        """Create the parameter whose value is only known at deploy time"""
        self.deploy_time_value_param = CfnParameter(
            self, "DeployTimeValue",
            type="String",
            default="resolved-at-deploy-time",
            description="Value injected into the image as the DEPLOY_TIME_VALUE build arg"
        )

    def _sample_build_args(self) -> Dict[str, str]:
        build_args = {
            f"SAMPLE_ARG_{i}": f"SAMPLE_VALUE_{i}"
            for i in range(1, SAMPLE_BUILD_ARG_COUNT + 1)
        }
        build_args["DEPLOY_TIME_VALUE"] = self.deploy_time_value_param.value_as_string
        return build_args

    def _create_outputs(self) -> None:
        """Create stack outputs"""

        CfnOutput(
            self, "ImageUri",
            value=self.builder.image_uri,
            description="URI of the image built during this deployment"
        )

        CfnOutput(
            self, "ImageTag",
            value=self.builder.image_tag,
            description="Tag assigned to this deployment's build"
        )

        CfnOutput(
            self, "BuildProjectName",
            value=self.builder.project.project_name,
            description="CodeBuild project building the image"
        )

        CfnOutput(
            self, "ImageFunctionName",
            value=self.image_function.function_name,
            description="Lambda function running the built image"
        )
