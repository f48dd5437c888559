from .models import MCPRequest, MCPResponse, LintResponse, PublishRequest
from .services.dsl_lint import get_dsl_linter
from .services.execution_guard import get_execution_guard
from .services.publish_gate import get_publish_gate
from .utils.errors import error_response
from . import config
import logging

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("strudel.router")


def _success(request_id: str, data) -> dict:
    return MCPResponse(request_id=request_id, type="success", data=data).model_dump(mode="json")


def _source(req: MCPRequest):
    """Return (code, None) or (None, error envelope)."""
    code = req.payload.get("code")
    if not isinstance(code, str):
        return None, error_response(req.request_id, "INVALID_PAYLOAD", "payload.code must be a string")
    if len(code) > config.MAX_SOURCE_CHARS:
        return None, error_response(
            req.request_id,
            "SOURCE_TOO_LARGE",
            f"Source is {len(code)} characters; limit is {config.MAX_SOURCE_CHARS}",
        )
    return code, None


def lint_response(code: str) -> LintResponse:
    linter = get_dsl_linter()
    result = linter.lint(code)
    return LintResponse(
        ok=result.ok,
        diagnostics=result.diagnostics,
        formatted=linter.format_diagnostics(result),
    )


async def route_request(raw_msg: dict) -> dict:
    try:
        # Validate request structure
        req = MCPRequest(**raw_msg)

        logger.info(f"Routing request: {req.request_id} Action: {req.action}")

        if req.action not in {"lint", "guard", "validate", "publish"}:
            # Default fallback for unknown actions
            return error_response(
                req.request_id,
                "UNKNOWN_ACTION",
                f"Unsupported action: {req.action}"
            )

        code, err = _source(req)
        if err is not None:
            return err

        if req.action == "lint":
            data = lint_response(code)
        elif req.action == "guard":
            data = get_execution_guard().check(code)
        elif req.action == "validate":
            data = get_publish_gate().validate(code)
        else:
            data = get_publish_gate().submit(PublishRequest(**req.payload))
        return _success(req.request_id, data.model_dump(mode="json"))

    except Exception as e:
        logger.error(f"Routing error: {str(e)}")
        # If we can't parse the request_id, use "unknown" or try to retrieve it safely
        req_id = raw_msg.get("request_id", "unknown") if isinstance(raw_msg, dict) else "unknown"
        return error_response(
            req_id,
            "INTERNAL_ERROR",
            str(e)
        )
