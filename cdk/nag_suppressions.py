"""
Common CDK-Nag suppressions for the Token Injectable Docker Builder
Use this file to centrally manage suppressions across all stacks
"""

from cdk_nag import NagSuppressions
from aws_cdk import Stack

def apply_common_suppressions(stack: Stack):
    """Apply suppressions that are acceptable for stacks using the builder"""

    common_suppressions = [
        {
            "id": "AwsSolutions-IAM4",
            "reason": "Provider framework and sample functions use the AWS managed basic execution role"
        },
        {
            "id": "AwsSolutions-IAM5",
            "reason": "Provider framework functions invoke handler versions through wildcard ARNs"
        },
        {
            "id": "AwsSolutions-L1",
            "reason": "Provider framework Lambda runtime versions are managed by CDK"
        },
        {
            "id": "AwsSolutions-SF1",
            "reason": "The Provider waiter state machine logs through its Lambda functions"
        },
        {
            "id": "AwsSolutions-SF2",
            "reason": "X-Ray tracing is not required for the build waiter state machine"
        }
    ]

    NagSuppressions.add_stack_suppressions(stack, common_suppressions)
