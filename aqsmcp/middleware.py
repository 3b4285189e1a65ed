import json
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import mcp.types as mt
from fastmcp.server.middleware import Middleware, MiddlewareContext

from aqsmcp.config import settings

# Configure Logger
logger = logging.getLogger("aqsmcp")


class JsonFormatter(logging.Formatter):
    """Formatter to output one JSON object per log line."""

    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "path": record.pathname,
            "lineno": record.lineno,
        }
        if hasattr(record, "props"):
            log_record.update(record.props)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def configure_logging():
    """Configure the package logger based on settings.

    StreamHandler writes to stderr, which keeps stdout free for the stdio transport.
    """
    handler = logging.StreamHandler()

    if settings.log_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    # Reset handlers to avoid duplication if called multiple times
    logger.handlers = []
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())


def _extract_tool_info(message: mt.CallToolRequest | mt.CallToolRequestParams) -> tuple[str, dict]:
    """
    Extract tool name and arguments from the message.
    Handles both CallToolRequest (has .params) and CallToolRequestParams (is params).
    """
    if hasattr(message, "params"):
        return message.params.name, message.params.arguments
    return message.name, message.arguments


def _redact(arguments: dict | None) -> dict:
    """Hide the API key before arguments reach the log."""
    if not arguments:
        return {}
    return {k: ("***" if k == "key" and v else v) for k, v in arguments.items()}


_QUERY_FIELDS = ("param", "bdate", "edate")
_ERROR_PREFIXES = ("Error:", "Error during signup:", "Credentials required:", "EPA AQS API Status: UNAVAILABLE")


def _query_window(arguments: dict | None) -> dict:
    """Pollutant and date range of a data tool call, empty for lists and account tools."""
    if not arguments:
        return {}
    return {k: arguments[k] for k in _QUERY_FIELDS if arguments.get(k)}


def _reported_error(result: mt.CallToolResult) -> bool:
    """Tools report AQS failures as ordinary text results, so isError stays False for them."""
    for block in getattr(result, "content", None) or []:
        text = getattr(block, "text", None)
        if text is not None:
            return text.startswith(_ERROR_PREFIXES)
    return False


class LoggingMiddleware(Middleware):
    async def on_call_tool(
        self,
        context: MiddlewareContext[mt.CallToolRequest],
        call_next: Callable[[MiddlewareContext[mt.CallToolRequest]], Awaitable[mt.CallToolResult]],
    ) -> mt.CallToolResult:
        tool_name, arguments = _extract_tool_info(context.message)

        start_time = time.time()

        # Log start (only if debug or json to avoid noise in simple mode)
        if settings.log_json or settings.log_level.upper() == "DEBUG":
            logger.info(
                f"Tool call started: {tool_name}",
                extra={
                    "props": {
                        "event": "tool_call_start",
                        "tool": tool_name,
                        "arguments": _redact(arguments),
                    }
                },
            )

        try:
            result = await call_next(context)
            duration = time.time() - start_time

            is_error = result.isError if hasattr(result, "isError") else False

            logger.info(
                f"Tool call completed: {tool_name}",
                extra={
                    "props": {
                        "event": "tool_call_end",
                        "tool": tool_name,
                        "duration_seconds": round(duration, 4),
                        "is_error": is_error,
                        "reported_error": _reported_error(result),
                        **_query_window(arguments),
                    }
                },
            )
            return result
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Tool call failed: {tool_name}",
                extra={
                    "props": {
                        "event": "tool_call_error",
                        "tool": tool_name,
                        "duration_seconds": round(duration, 4),
                        "error": str(e),
                    }
                },
                exc_info=True,
            )
            raise
