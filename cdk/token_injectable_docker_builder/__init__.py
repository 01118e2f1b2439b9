"""
Token Injectable Docker Builder

Builds Docker images with deploy-time build args in CodeBuild and exposes the
pushed image to ECS and Lambda.
"""

from .constructs.buildspec import BuildJobSpec, RegistryEncryption
from .constructs.token_injectable_docker_builder import TokenInjectableDockerBuilder

__all__ = [
    "BuildJobSpec",
    "RegistryEncryption",
    "TokenInjectableDockerBuilder",
]
