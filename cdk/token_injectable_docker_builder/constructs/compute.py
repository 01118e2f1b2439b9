"""
Compute Construct for the build trigger custom resource and its Lambda handlers
"""

from aws_cdk import (
    aws_lambda as lambda_,
    aws_iam as iam,
    CustomResource,
    Duration,
    custom_resources as cr,
)
from cdk_nag import NagSuppressions
from constructs import Construct
from typing import Any, Dict, Optional
import os
import uuid

from .buildspec import BuildJobSpec
from .codebuild import CodeBuildConstruct

HANDLERS_PATH = os.path.join(os.path.dirname(__file__), '..', 'lambda_handlers')
HANDLER_TIMEOUT = Duration.minutes(15)
ARTIFACT_TAG_ATTRIBUTE = "artifactTag"


class BuildTriggerConstruct(Construct):
    """
    Starts the CodeBuild project on every deployment and waits until it finishes.

    The onEvent handler starts a build, the isComplete handler is polled by the
    Provider framework until the build succeeds (reporting the image tag) or fails.
    """

    def __init__(self, scope: Construct, construct_id: str,
                 job_spec: BuildJobSpec,
                 build_project: CodeBuildConstruct,
                 source_hash: Optional[str] = None,
                 force_rebuild: bool = True,
                 query_interval: Optional[Duration] = None,
                 total_timeout: Optional[Duration] = None,
                 **kwargs) -> None:
        super().__init__(scope, construct_id)

        self.job_spec = job_spec
        self.build_project = build_project

        # Create the Lambda handlers
        self._create_handler_functions()

        # Create the provider and the custom resource it backs
        self.provider = cr.Provider(
            self, "CustomResourceProvider",
            on_event_handler=self.on_event_function,
            is_complete_handler=self.is_complete_function,
            query_interval=query_interval or Duration.seconds(30),
            total_timeout=total_timeout or Duration.hours(1)
        )

        self.resource = CustomResource(
            self, "BuildTriggerResource",
            service_token=self.provider.service_token,
            properties=self._resource_properties(source_hash, force_rebuild)
        )
        self.resource.node.add_dependency(self.build_project.project)

        self._apply_suppressions()

    def _create_handler_functions(self) -> None:
        """Create the onEvent and isComplete Lambda functions"""
        code = lambda_.Code.from_asset(
            os.path.abspath(HANDLERS_PATH),
            exclude=["__pycache__", "*.pyc"]
        )

        self.on_event_function = lambda_.Function(
            self, "OnEventHandlerFunction",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="on_event.handler",
            code=code,
            timeout=HANDLER_TIMEOUT
        )
        self.on_event_function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["codebuild:StartBuild"],
                resources=[self.build_project.project_arn]
            )
        )

        self.is_complete_function = lambda_.Function(
            self, "IsCompleteHandlerFunction",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="is_complete.handler",
            code=code,
            environment={
                "IMAGE_TAG": self.job_spec.image_tag
            },
            timeout=HANDLER_TIMEOUT
        )
        self.is_complete_function.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "codebuild:BatchGetBuilds",
                    "codebuild:ListBuildsForProject"
                ],
                resources=[self.build_project.project_arn]
            )
        )
        self.is_complete_function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["logs:GetLogEvents"],
                resources=["*"]
            )
        )

    def _resource_properties(self, source_hash: Optional[str],
                             force_rebuild: bool) -> Dict[str, Any]:
        """Custom resource properties; any change makes CloudFormation send an Update"""
        properties = {
            'ProjectName': self.build_project.project_name,
            'ImageTag': self.job_spec.image_tag,
        }
        if source_hash:
            properties['SourceHash'] = source_hash
        if force_rebuild:
            properties['Trigger'] = str(uuid.uuid4())
        return properties

    def _apply_suppressions(self) -> None:
        NagSuppressions.add_resource_suppressions(
            self,
            [
                {"id": "AwsSolutions-IAM4", "reason": "Handlers use the AWS managed basic execution role"},
                {"id": "AwsSolutions-IAM5", "reason": "Build log group and stream names are only known after the build starts"},
                {"id": "AwsSolutions-L1", "reason": "Provider framework functions use the runtime chosen by CDK"}
            ],
            apply_to_children=True
        )

    @property
    def artifact_tag(self) -> str:
        """Image tag reported by the isComplete handler once the build succeeded"""
        return self.resource.get_att_string(ARTIFACT_TAG_ATTRIBUTE)
