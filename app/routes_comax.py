"""
HTTP routes for the Comax operations
"""
import json
import logging
from typing import Any, Callable, Dict

from fastapi import Body, HTTPException
from fastapi.responses import JSONResponse

from app.comax.formatting import render_result, to_json
from app.comax.service import TOOLS, ComaxService
from app.comax_client.exceptions import ComaxConfigError

logger = logging.getLogger(__name__)


def register_comax_routes(app, get_service: Callable[[], ComaxService]):
    """
    Register the Comax endpoints on the FastAPI app.

    Args:
        app: FastAPI application
        get_service: Returns the process-wide ComaxService
    """

    @app.get("/api/comax/tools")
    def list_comax_tools():
        return {"tools": sorted(TOOLS)}

    @app.post("/api/comax/{tool_name}")
    def run_comax_tool(tool_name: str, payload: Dict[str, Any] = Body(...)):
        """
        Run one Comax tool with the same camelCase parameters as the MCP tool.

        Vendor and validation failures are reported in-band (ok=false, HTTP 200).
        """
        if tool_name not in TOOLS:
            raise HTTPException(status_code=404, detail=f"Unknown Comax tool: {tool_name}")

        try:
            service = get_service()
        except ComaxConfigError as e:
            raise HTTPException(status_code=500, detail=f"Invalid Comax configuration: {e}")

        try:
            result = service.run_tool(tool_name, payload)
        except Exception as e:
            logger.exception(f"Unexpected error in {tool_name}")
            return JSONResponse(
                status_code=500,
                content={"ok": False, "error": f"Unexpected error: {e}"},
            )

        return JSONResponse({
            "ok": result.success,
            "result": json.loads(to_json(result.to_dict())),
            "text": render_result(result),
        })
