"""
TokenInjectableDockerBuilder Construct
"""

from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_lambda as lambda_,
    aws_s3_assets as s3_assets,
    Duration,
)
from constructs import Construct
from typing import Dict, List, Optional

from .buildspec import BuildJobSpec, NetworkPlacement, RegistryEncryption, SourceLocator
from .codebuild import CodeBuildConstruct
from .compute import BuildTriggerConstruct
from .repository import RepositoryConstruct


class TokenInjectableDockerBuilder(Construct):
    """
    Builds a Docker image in CodeBuild during deployment and pushes it to ECR.

    Unlike a Docker image asset, build args may contain CDK tokens: they are
    resolved by CloudFormation before the build runs. The deployment waits for
    the build, and ``container_image`` / ``docker_image_code`` reference the exact
    tag produced by this deployment's build.

    Args:
        path: directory holding the Dockerfile and build context
        build_args: passed to ``docker build`` as ``--build-arg KEY=VALUE``
        docker_login_secret_arn: Secrets Manager secret with ``username`` and
            ``password`` keys for Docker Hub; login is skipped when omitted
        vpc, security_groups, subnet_selection: network placement of the build
        install_commands: extra commands for the install phase
        pre_build_commands: extra commands run first in the pre_build phase
        kms_encryption: encrypt the repository with a new KMS key instead of AES-256
        force_rebuild: rebuild on every deployment even when no input changed
        query_interval: how often the build status is polled (30 seconds)
        total_timeout: how long the deployment waits for the build (1 hour)
    """

    def __init__(self, scope: Construct, construct_id: str, *,
                 path: str,
                 build_args: Optional[Dict[str, str]] = None,
                 docker_login_secret_arn: Optional[str] = None,
                 vpc: Optional[ec2.IVpc] = None,
                 security_groups: Optional[List[ec2.ISecurityGroup]] = None,
                 subnet_selection: Optional[ec2.SubnetSelection] = None,
                 install_commands: Optional[List[str]] = None,
                 pre_build_commands: Optional[List[str]] = None,
                 kms_encryption: bool = False,
                 force_rebuild: bool = True,
                 query_interval: Optional[Duration] = None,
                 total_timeout: Optional[Duration] = None) -> None:
        super().__init__(scope, construct_id)

        encryption = RegistryEncryption.KMS if kms_encryption else RegistryEncryption.AES_256

        # Package the build context as an S3 asset
        self.source_asset = s3_assets.Asset(self, "SourceAsset", path=path)

        network_placement = None
        if vpc is not None:
            network_placement = NetworkPlacement(
                vpc=vpc,
                subnet_selection=subnet_selection,
                security_groups=tuple(security_groups or ())
            )

        self.job_spec = BuildJobSpec(
            source_locator=SourceLocator(
                bucket_name=self.source_asset.s3_bucket_name,
                object_key=self.source_asset.s3_object_key
            ),
            build_args=build_args or {},
            install_commands=install_commands or [],
            pre_build_commands=pre_build_commands or [],
            network_placement=network_placement,
            registry_encryption=encryption,
            docker_login_secret_arn=docker_login_secret_arn
        )

        self.repository_construct = RepositoryConstruct(
            self, "Repository",
            encryption=encryption
        )

        self.codebuild_construct = CodeBuildConstruct(
            self, "Build",
            job_spec=self.job_spec,
            repository=self.repository_construct
        )

        self.trigger_construct = BuildTriggerConstruct(
            self, "Trigger",
            job_spec=self.job_spec,
            build_project=self.codebuild_construct,
            source_hash=self.source_asset.asset_hash,
            force_rebuild=force_rebuild,
            query_interval=query_interval,
            total_timeout=total_timeout
        )

        # Resolve both handles from the tag the build reported, never "latest"
        artifact_tag = self.trigger_construct.artifact_tag
        self.container_image = ecs.ContainerImage.from_ecr_repository(
            self.repository_construct.repository, artifact_tag
        )
        self.docker_image_code = lambda_.DockerImageCode.from_ecr(
            self.repository_construct.repository,
            tag_or_digest=artifact_tag
        )
        self.image_uri = self.repository_construct.repository.repository_uri_for_tag(artifact_tag)

    @property
    def ecr_repository(self):
        """The ECR repository that stores the built image"""
        return self.repository_construct.repository

    @property
    def image_tag(self) -> str:
        """The tag this construct instance builds and pushes"""
        return self.job_spec.image_tag

    @property
    def project(self):
        return self.codebuild_construct.project
