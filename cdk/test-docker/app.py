import os


def handler(event, context):
    return {
        "sample_arg_1": os.environ.get("SAMPLE_ARG_1"),
        "deploy_time_value": os.environ.get("DEPLOY_TIME_VALUE"),
    }
