"""
End-to-end walk through the trigger / poll protocol with stubbed AWS clients
"""

import aws_cdk as cdk

import is_complete
import on_event
from conftest import PROJECT_NAME, build_detail, make_event
from token_injectable_docker_builder import TokenInjectableDockerBuilder
from token_injectable_docker_builder.constructs.compute import ARTIFACT_TAG_ATTRIBUTE

REPOSITORY_NAME = "builder-repo"


def render(value, references):
    """Substitute known CloudFormation references in a resolved expression"""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and "Fn::Join" in value:
        separator, parts = value["Fn::Join"]
        return separator.join(render(part, references) for part in parts)
    for reference, replacement in references:
        if value == reference:
            return replacement
    return "<unresolved>"


def test_build_is_triggered_polled_and_resolved(docker_context, codebuild_client, logs_client):
    app = cdk.App()
    stack = cdk.Stack(app, "TestStack")
    builder = TokenInjectableDockerBuilder(stack, "Builder", path=docker_context, build_args={"ENV": "test"})
    spec = builder.job_spec

    assert spec.network_placement is None
    assert spec.docker_login_secret_arn is None
    assert "--build-arg ENV=test" in spec.build_command()

    create = make_event("Create", ImageTag=spec.image_tag)
    trigger_result = on_event.trigger(create, codebuild_client)
    codebuild_client.start_build.assert_called_once_with(projectName=PROJECT_NAME)

    codebuild_client.batch_get_builds.side_effect = [
        {"builds": [build_detail("IN_PROGRESS")]},
        {"builds": [build_detail("IN_PROGRESS")]},
        {"builds": [build_detail("SUCCEEDED")]},
    ]
    poll_event = dict(create, PhysicalResourceId=trigger_result["PhysicalResourceId"])
    results = [is_complete.poll(poll_event, codebuild_client, logs_client) for _ in range(3)]

    assert results[:2] == [{"IsComplete": False}, {"IsComplete": False}]
    assert results[2]["IsComplete"] is True
    artifact_tag = results[2]["Data"]["artifactTag"]
    assert artifact_tag == spec.image_tag
    assert f"$ECR_REPO_URI:{artifact_tag}" in spec.build_command()
    assert codebuild_client.start_build.call_count == 1

    # The handle is the repository URI joined to the reported tag attribute
    repository_id = stack.get_logical_id(builder.ecr_repository.node.default_child)
    resource_id = stack.get_logical_id(builder.trigger_construct.resource.node.default_child)
    resolved_uri = stack.resolve(builder.image_uri)

    assert resolved_uri["Fn::Join"][1][-1] == {"Fn::GetAtt": [resource_id, ARTIFACT_TAG_ATTRIBUTE]}
    image_uri = render(resolved_uri, [
        ({"Ref": repository_id}, REPOSITORY_NAME),
        ({"Fn::GetAtt": [resource_id, ARTIFACT_TAG_ATTRIBUTE]}, artifact_tag),
    ])
    assert image_uri.endswith(f"/{REPOSITORY_NAME}:{artifact_tag}")
