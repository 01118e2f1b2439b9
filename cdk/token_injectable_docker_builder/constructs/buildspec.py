"""
Build job specification for the Docker image CodeBuild project
"""

import shlex
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from aws_cdk import Token

BUILDSPEC_VERSION = "0.2"
REPOSITORY_URI_VARIABLE = "$ECR_REPO_URI"


class RegistryEncryption(Enum):
    """Encryption mode of the ECR repository"""

    AES_256 = "AES256"
    KMS = "KMS"


@dataclass(frozen=True)
class SourceLocator:
    """Location of the packaged build source"""

    bucket_name: str
    object_key: str


@dataclass(frozen=True)
class NetworkPlacement:
    """VPC placement handed to CodeBuild as is"""

    vpc: Any
    subnet_selection: Optional[Any] = None
    security_groups: Tuple[Any, ...] = ()


def generate_image_tag() -> str:
    """Generate a unique tag for one build output"""
    return str(uuid.uuid4())


def build_arg_flags(build_args: Optional[Mapping[str, str]]) -> str:
    """Turn build args into ``--build-arg KEY=VALUE`` flags

    Literal pairs are shell-quoted. Pairs holding unresolved tokens are left
    as is; CloudFormation substitutes their values into the buildspec.
    """
    if not build_args:
        return ""
    return " ".join(f"--build-arg {_quote_pair(key, value)}" for key, value in build_args.items())


def _quote_pair(key: str, value: str) -> str:
    pair = f"{key}={value}"
    if Token.is_unresolved(pair):
        return pair
    return shlex.quote(pair)


def docker_login_commands(docker_login_secret_arn: Optional[str]) -> List[str]:
    """Commands logging into Docker Hub with credentials from Secrets Manager"""
    if not docker_login_secret_arn:
        return ['echo "No Docker credentials. Skipping Docker Hub login."']

    read_secret = (
        f"aws secretsmanager get-secret-value --secret-id {docker_login_secret_arn} "
        "--query SecretString --output text"
    )
    return [
        'echo "Retrieving Docker credentials..."',
        "apt-get update -y && apt-get install -y jq",
        f"DOCKER_USERNAME=$({read_secret} | jq -r .username)",
        f"DOCKER_PASSWORD=$({read_secret} | jq -r .password)",
        'echo "Logging in to Docker Hub..."',
        "echo $DOCKER_PASSWORD | docker login --username $DOCKER_USERNAME --password-stdin",
    ]


ECR_LOGIN_COMMANDS = [
    'echo "Retrieving AWS Account ID..."',
    "export ACCOUNT_ID=$(aws sts get-caller-identity --query Account --output text)",
    'echo "Logging into Amazon ECR..."',
    "aws ecr get-login-password --region $AWS_DEFAULT_REGION | docker login --username AWS "
    "--password-stdin $ACCOUNT_ID.dkr.ecr.$AWS_DEFAULT_REGION.amazonaws.com",
]


@dataclass(frozen=True)
class BuildJobSpec:
    """
    Everything CodeBuild needs to build and push one tagged image.

    The image tag is fixed when the spec is created and shared by the build
    commands, the push commands and the completion handler.
    """

    source_locator: SourceLocator
    build_args: Mapping[str, str] = field(default_factory=dict)
    install_commands: Sequence[str] = ()
    pre_build_commands: Sequence[str] = ()
    image_tag: str = field(default_factory=generate_image_tag)
    network_placement: Optional[NetworkPlacement] = None
    registry_encryption: RegistryEncryption = RegistryEncryption.AES_256
    docker_login_secret_arn: Optional[str] = None

    def __post_init__(self) -> None:
        # Freeze caller-owned collections
        object.__setattr__(self, "build_args", dict(self.build_args or {}))
        object.__setattr__(self, "install_commands", tuple(self.install_commands or ()))
        object.__setattr__(self, "pre_build_commands", tuple(self.pre_build_commands or ()))

    @property
    def build_arg_flags(self) -> str:
        return build_arg_flags(self.build_args)

    def image_reference(self, repository_uri: str = REPOSITORY_URI_VARIABLE) -> str:
        """``<repository>:<image tag>`` for this build's output"""
        return f"{repository_uri}:{self.image_tag}"

    def build_command(self) -> str:
        parts = ["docker build"]
        if self.build_arg_flags:
            parts.append(self.build_arg_flags)
        parts.append(f"-t {self.image_reference()} $CODEBUILD_SRC_DIR")
        return " ".join(parts)

    def to_buildspec(self) -> Dict[str, Any]:
        """Get the build specification document for CodeBuild"""
        return {
            "version": BUILDSPEC_VERSION,
            "phases": {
                "install": {
                    "commands": [
                        'echo "Beginning install phase..."',
                        *self.install_commands,
                    ]
                },
                "pre_build": {
                    "commands": [
                        *self.pre_build_commands,
                        *docker_login_commands(self.docker_login_secret_arn),
                        *ECR_LOGIN_COMMANDS,
                    ]
                },
                "build": {
                    "commands": [
                        f'echo "Building Docker image with tag {self.image_tag}..."',
                        self.build_command(),
                    ]
                },
                "post_build": {
                    "commands": [
                        f'echo "Pushing Docker image with tag {self.image_tag}..."',
                        f"docker push {self.image_reference()}",
                    ]
                },
            },
        }
