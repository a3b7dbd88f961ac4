from __future__ import annotations

import hmac
import json
from typing import Annotated

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from charmline import __version__
from charmline.apps.runtime_support import ServerRuntime, build_runtime
from charmline.cli import base_parser
from charmline.core.mcp.server import PARSE_ERROR, error_response


def create_app(config_path: str | None = None, runtime: ServerRuntime | None = None) -> FastAPI:
    runtime = runtime or build_runtime(config_path=config_path)
    app = FastAPI(title="Charmline MCP Server", version=__version__)
    mcp_path = f"{runtime.cfg.server.base_path.rstrip('/')}/mcp"

    def _require_bearer(authorization: Annotated[str | None, Header()] = None) -> None:
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip().encode(), runtime.auth_token.encode()):
            raise HTTPException(
                status_code=401,
                detail="invalid_bearer_token",
                headers={"WWW-Authenticate": "Bearer"},
            )

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "version": __version__,
            "providers": runtime.orchestrator.provider_names(),
        }

    @app.options(mcp_path)
    def preflight() -> Response:
        return Response(
            status_code=204,
            headers={
                "Access-Control-Allow-Origin": runtime.cfg.server.cors_allow_origin,
                "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
                "Access-Control-Allow-Headers": "Authorization, Content-Type",
            },
        )

    @app.post(mcp_path)
    async def mcp(request: Request, _=Depends(_require_bearer)) -> Response:
        try:
            message = json.loads(await request.body())
        except ValueError:
            return JSONResponse(error_response(None, PARSE_ERROR, "Parse error"))
        reply = await runtime.mcp.handle(message)
        if reply is None:
            return Response(status_code=202)
        return JSONResponse(reply)

    return app


def main() -> int:
    parser = base_parser("charmline-api", "Charmline MCP tool server")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    api = create_app(config_path=args.config)
    uvicorn.run(api, host=args.host, port=args.port, log_level="info")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
