"""
CodeBuild Construct for the Docker image build project
"""

from aws_cdk import (
    aws_codebuild as codebuild,
    aws_iam as iam,
    aws_s3 as s3,
    Tags,
)
from cdk_nag import NagSuppressions
from constructs import Construct
from typing import Any, Dict

from .buildspec import BuildJobSpec
from .repository import RepositoryConstruct


class CodeBuildConstruct(Construct):
    """
    Manages the CodeBuild project that builds and pushes the Docker image.
    """

    def __init__(self, scope: Construct, construct_id: str,
                 job_spec: BuildJobSpec,
                 repository: RepositoryConstruct,
                 **kwargs) -> None:
        super().__init__(scope, construct_id)

        self.job_spec = job_spec
        self.repository = repository

        # Create the Docker build project
        self._create_build_project()

        # Grant ECR, Secrets Manager and KMS access
        self._grant_permissions()

        self._apply_suppressions()
        Tags.of(self.project).add("Project", "token-injectable-docker-builder")

    def _create_build_project(self) -> None:
        """Create the CodeBuild project running the job's buildspec"""
        source_bucket = s3.Bucket.from_bucket_name(
            self, "SourceBucket", self.job_spec.source_locator.bucket_name
        )

        environment_variables = {
            'ECR_REPO_URI': codebuild.BuildEnvironmentVariable(
                value=self.repository.repository_uri
            )
        }

        network = self._network_properties()

        self.project = codebuild.Project(
            self, "CodeBuildProject",
            source=codebuild.Source.s3(
                bucket=source_bucket,
                path=self.job_spec.source_locator.object_key
            ),
            environment=codebuild.BuildEnvironment(
                build_image=codebuild.LinuxBuildImage.STANDARD_7_0,
                privileged=True  # Required for Docker builds
            ),
            environment_variables=environment_variables,
            build_spec=codebuild.BuildSpec.from_object(self.job_spec.to_buildspec()),
            **network
        )

    def _network_properties(self) -> Dict[str, Any]:
        """VPC, subnet and security group settings, if a placement was given"""
        placement = self.job_spec.network_placement
        if placement is None:
            return {}

        network = {'vpc': placement.vpc}
        if placement.subnet_selection is not None:
            network['subnet_selection'] = placement.subnet_selection
        if placement.security_groups:
            network['security_groups'] = list(placement.security_groups)
        return network

    def _grant_permissions(self) -> None:
        self.repository.repository.grant_pull_push(self.project)
        self.project.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "ecr:GetAuthorizationToken",
                    "ecr:GetDownloadUrlForLayer",
                    "ecr:BatchCheckLayerAvailability"
                ],
                resources=["*"]
            )
        )

        if self.job_spec.docker_login_secret_arn:
            self.project.add_to_role_policy(
                iam.PolicyStatement(
                    actions=["secretsmanager:GetSecretValue"],
                    resources=[self.job_spec.docker_login_secret_arn]
                )
            )

        if self.repository.encryption_key is not None:
            self.repository.encryption_key.grant_encrypt_decrypt(self.project.role)

    def _apply_suppressions(self) -> None:
        NagSuppressions.add_resource_suppressions(
            self.project,
            [
                {"id": "AwsSolutions-CB4", "reason": "Build artifacts are images pushed to ECR, not CodeBuild output artifacts"},
                {"id": "AwsSolutions-IAM5", "reason": "ecr:GetAuthorizationToken does not support resource-level permissions"}
            ],
            apply_to_children=True
        )

    @property
    def project_name(self) -> str:
        """Returns the CodeBuild project name"""
        return self.project.project_name

    @property
    def project_arn(self) -> str:
        """Returns the CodeBuild project ARN"""
        return self.project.project_arn
