"""
Repository Construct for the ECR repository that receives built images
"""

from aws_cdk import (
    aws_ecr as ecr,
    aws_kms as kms,
    Duration,
    Tags,
)
from constructs import Construct
from typing import Optional

from .buildspec import RegistryEncryption


class RepositoryConstruct(Construct):
    """
    Manages the ECR repository and its optional KMS key.
    """

    def __init__(self, scope: Construct, construct_id: str,
                 encryption: RegistryEncryption = RegistryEncryption.AES_256,
                 **kwargs) -> None:
        super().__init__(scope, construct_id)

        self.encryption = encryption
        self.encryption_key: Optional[kms.Key] = None

        if encryption is RegistryEncryption.KMS:
            self._create_encryption_key()

        self._create_repository()

        Tags.of(self.repository).add("Project", "token-injectable-docker-builder")

    def _create_encryption_key(self) -> None:
        """Create a rotating KMS key for image encryption"""
        self.encryption_key = kms.Key(
            self, "EcrEncryptionKey",
            enable_key_rotation=True
        )

    def _create_repository(self) -> None:
        """Create the ECR repository with lifecycle and scan settings"""
        if self.encryption is RegistryEncryption.KMS:
            encryption = ecr.RepositoryEncryption.KMS
        else:
            encryption = ecr.RepositoryEncryption.AES_256

        self.repository = ecr.Repository(
            self, "ECRRepository",
            lifecycle_rules=[
                ecr.LifecycleRule(
                    rule_priority=1,
                    description="Remove untagged images after 1 day",
                    tag_status=ecr.TagStatus.UNTAGGED,
                    max_image_age=Duration.days(1)
                )
            ],
            encryption=encryption,
            encryption_key=self.encryption_key,
            image_scan_on_push=True
        )

    @property
    def repository_uri(self) -> str:
        """Returns the repository URI"""
        return self.repository.repository_uri
