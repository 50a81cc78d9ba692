"""Lambda adapter for setting logging context from Lambda events."""

from typing import Any

from skinflow.logging.context import set_correlation_id, set_extra_context
from skinflow.types import LambdaContext


def set_lambda_context(
    event: dict[str, Any],
    context: LambdaContext,
) -> None:
    """Set logging context from Lambda event and context.

    The Lambda request id becomes the flow correlation id so the handler
    and every stage of the diagnosis flow log under the same id.

    Args:
        event: Lambda event dictionary.
        context: Lambda context object.
    """
    set_correlation_id(context.aws_request_id)
    set_extra_context(
        function_name=context.function_name,
        function_version=context.function_version,
    )

    request_context = event.get("requestContext")
    if isinstance(request_context, dict) and "requestId" in request_context:
        set_extra_context(api_request_id=str(request_context["requestId"]))
