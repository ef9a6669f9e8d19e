"""
Request dispatcher.

wrap_api_call adapts a plain domain handler to a FastAPI endpoint so the
handler never has to touch framework types. The handler takes the decoded
JSON object and returns a JSON-serializable mapping, or raises.

Outcomes:
    body is not a JSON object      -> 400 {"error": ...}, handler not called
    body read exceeds read timeout -> 408 {"error": ...}
    handler returns                -> 200 result
    handler raises / times out     -> 500 {"error": ...}
"""

import asyncio
import json
import logging
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional, Type

import anyio
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel, ValidationError

from skeleton.domain.api_call import ApiCall, error_message
from skeleton.domain.exceptions import ApiError, RequestDecodeError
from skeleton.infrastructure.monitoring.tracing import get_tracer
from skeleton.presentation.api.dependencies import get_container

logger = logging.getLogger(__name__)

READ_TIMEOUT_MESSAGE = "timed out reading request body"

_JSON_TYPE_NAMES = {
    list: "array",
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
    type(None): "null",
}


def record_request_error(request: Request, message: str) -> None:
    """
    Attach an error to the request for the logging middleware.

    Args:
        request: Current request
        message: Error message
    """
    errors = getattr(request.state, "errors", None)
    if errors is None:
        errors = []
        request.state.errors = errors
    errors.append(message)


def _reject_constant(name: str) -> Any:
    raise RequestDecodeError(f"invalid JSON body: unsupported constant {name}")


async def decode_json_object(request: Request, read_timeout: float) -> Dict[str, Any]:
    """
    Read the request body and decode it as a JSON object.

    Args:
        request: Current request
        read_timeout: Maximum seconds to wait for the body

    Returns:
        Decoded mapping

    Raises:
        RequestDecodeError: If the body is not valid JSON or not an object
        asyncio.TimeoutError: If the body was not received in time
    """
    body = await asyncio.wait_for(request.body(), timeout=read_timeout)

    try:
        payload = json.loads(body, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise RequestDecodeError(f"invalid JSON body: {e}") from e

    if not isinstance(payload, dict):
        kind = _JSON_TYPE_NAMES.get(type(payload), type(payload).__name__)
        raise RequestDecodeError(f"request body must be a JSON object, got {kind}")

    return payload


def _as_mapping(result: Any) -> Dict[str, Any]:
    if result is None:
        return {}
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, Mapping):
        return jsonable_encoder(dict(result))
    raise TypeError(
        f"handler returned {type(result).__name__}, expected a mapping"
    )


def wrap_api_call(
    handler: Callable[[Any], Any],
    schema: Optional[Type[BaseModel]] = None,
) -> Callable[[Request], Any]:
    """
    Wrap a domain handler into a FastAPI endpoint.

    Args:
        handler: Callable taking the decoded mapping (or a `schema`
            instance) and returning a mapping or pydantic model
        schema: Optional pydantic model the body is validated into

    Returns:
        Async endpoint function
    """
    tracer = get_tracer(__name__)

    async def endpoint(request: Request) -> JSONResponse:
        settings = get_container(request).settings

        try:
            payload = await decode_json_object(request, settings.read_timeout)
            argument = schema.model_validate(payload) if schema is not None else payload
        except asyncio.TimeoutError:
            record_request_error(request, READ_TIMEOUT_MESSAGE)
            return JSONResponse(
                status_code=status.HTTP_408_REQUEST_TIMEOUT,
                content={"error": READ_TIMEOUT_MESSAGE},
            )
        except (RequestDecodeError, ValidationError) as e:
            message = error_message(e)
            record_request_error(request, message)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": message},
            )

        call = ApiCall(payload)

        with tracer.start_as_current_span(f"api {request.url.path}") as span:
            try:
                with anyio.move_on_after(settings.write_timeout) as deadline:
                    result = await anyio.to_thread.run_sync(
                        partial(handler, argument), abandon_on_cancel=True
                    )
                # a TimeoutError raised by the handler itself passes through as is
                if deadline.cancelled_caught:
                    raise ApiError(
                        f"handler timed out after {settings.write_timeout:g}s"
                    )
                mapping = _as_mapping(result)
            except Exception as e:
                call.fail(e)
            else:
                call.resolve(mapping)

            if not call.succeeded:
                span.record_exception(call.error)
                span.set_status(Status(StatusCode.ERROR, error_message(call.error)))

        if not call.succeeded:
            record_request_error(request, error_message(call.error))
            logger.debug(
                "api handler failed",
                extra={"fields": {"path": request.url.path, "call": repr(call)}},
            )

        return JSONResponse(status_code=call.status_code, content=call.response_body())

    endpoint.__name__ = getattr(handler, "__name__", "api_call")
    return endpoint
