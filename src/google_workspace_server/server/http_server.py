"""HTTP shim exposing the same tools as REST endpoints.

Routes:
    GET  /health            -> {"status": "ok"}
    GET  /tools             -> {"tools": [...]}, the MCP tool catalog
    POST /tools/{tool_name} -> the tool result envelope {content, isError}

Any handler failure answers 500 with {"error": message}.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from mcp.shared.exceptions import McpError
from mcp.types import ListToolsResult
from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from google_workspace_server.config import Settings
from google_workspace_server.server.dispatcher import ToolDispatcher, create_dispatcher
from google_workspace_server.server.tools import list_tools

logger = logging.getLogger(__name__)


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error_response(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=500)


def create_app(dispatcher: ToolDispatcher) -> Starlette:
    """Build the Starlette application around a dispatcher.

    Args:
        dispatcher: Dispatcher shared by all requests.

    Returns:
        ASGI application ready for uvicorn.
    """

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    async def get_tools(request: Request) -> JSONResponse:
        try:
            return JSONResponse(_dump(ListToolsResult(tools=list_tools())))
        except Exception as e:
            logger.exception("Error listing tools")
            return _error_response(str(e))

    async def call_tool(request: Request) -> JSONResponse:
        tool_name = request.path_params["tool_name"]
        try:
            body = await request.body()
            arguments = json.loads(body) if body.strip() else {}
            if not isinstance(arguments, dict):
                raise ValueError("Request body must be a JSON object of tool arguments")
            result = await dispatcher.invoke(tool_name, arguments)
        except McpError as e:
            logger.warning("Rejected call to %s: %s", tool_name, e)
            return _error_response(str(e))
        except Exception as e:
            logger.exception(f"Error handling call to {tool_name}")
            return _error_response(str(e))
        return JSONResponse(_dump(result))

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await dispatcher.close()

    return Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/tools", get_tools, methods=["GET"]),
            Route("/tools/{tool_name}", call_tool, methods=["POST"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            )
        ],
        lifespan=lifespan,
    )


def run(settings: Settings, host: str | None = None, port: int | None = None) -> None:
    """Serve the HTTP shim until interrupted."""
    app = create_app(create_dispatcher(settings))
    bind_host = host if host is not None else settings.host
    bind_port = port if port is not None else settings.port
    logger.info(f"Google Workspace HTTP server running on http://{bind_host}:{bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=settings.log_level.lower())
