from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
from starlette.websockets import WebSocketState
from fastapi.middleware.cors import CORSMiddleware
from .models import GuardDecision, LintRequest, LintResponse, PublishDecision, PublishRequest, ValidateResponse
from .router import route_request, lint_response
from .services.execution_guard import get_execution_guard
from .services.publish_gate import get_publish_gate
from . import config
import uvicorn
import logging
import uuid

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("strudel.server")

app = FastAPI(title="Strudel Lint")

# The editor runs on a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _check_size(code: str) -> None:
    if len(code) > config.MAX_SOURCE_CHARS:
        raise HTTPException(
            status_code=413,
            detail=f"Source is {len(code)} characters; limit is {config.MAX_SOURCE_CHARS}",
        )


@app.get("/")
async def health_check():
    return {"status": "ok", "service": "Strudel Lint", "version": "0.1.0"}


@app.post("/lint", response_model=LintResponse)
async def lint_endpoint(req: LintRequest):
    _check_size(req.code)
    return lint_response(req.code)


@app.post("/guard", response_model=GuardDecision)
async def guard_endpoint(req: LintRequest):
    _check_size(req.code)
    return get_execution_guard().check(req.code)


@app.post("/publish/validate", response_model=ValidateResponse)
async def publish_validate_endpoint(req: LintRequest):
    _check_size(req.code)
    return get_publish_gate().validate(req.code)


@app.post("/publish", response_model=PublishDecision)
async def publish_endpoint(req: PublishRequest):
    _check_size(req.code)
    return get_publish_gate().submit(req)


@app.websocket("/ws/lint")
async def lint_ws(ws: WebSocket):
    await ws.accept()
    logger.info("Client connected")

    try:
        while True:
            msg = await ws.receive_json()

            # Keystroke format from the editor: {"type": "lint", "code": "..."}
            if isinstance(msg, dict) and msg.get("type") == "lint":
                request_id = msg.get("request_id") or str(uuid.uuid4())[:8]
                internal_msg = {
                    "request_id": request_id,
                    "action": "lint",
                    "payload": {"code": msg.get("code")},
                }
                response = await route_request(internal_msg)
            else:
                # Full request envelopes
                response = await route_request(msg)
            await ws.send_json(response)

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket fatal error: {e}")
        if ws.client_state == WebSocketState.CONNECTED:
            await ws.send_json({
                "type": "error",
                "error": {"code": "FATAL", "message": str(e)}
            })


if __name__ == "__main__":
    # Note: Using string import for reload functionality
    uvicorn.run("strudel_lint.server:app", host=config.HOST, port=config.PORT, reload=True)
