"""
HTTP surface for the query engine.

GET  /api/health        liveness probe
POST /api/chat          one-shot query, returns the AgentResponse as JSON
POST /api/chat/stream   same query as Server-Sent Events: every Step as
                        `event: step`, then `answer` or `error`, then `done`

Request body: {"message": str, "geminiApiKey"?: str, "rawgApiKey"?: str}.
Per-request keys take precedence over the environment.
"""
import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse

from .config import load_settings
from .orchestrator import run_query, run_query_streaming

MESSAGE_REQUIRED = "Message is required"
KEYS_NOT_CONFIGURED = "API keys not configured. Please provide your own API keys in Settings."


def sse_frame(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def create_app(data_source=None) -> FastAPI:
    """Build the app. `data_source` replaces the RAWG client for every request."""
    app = FastAPI(title="Game Data Agent")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    def resolve_keys(body: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        """(gemini_key, rawg_key, error). error is set when a required key is missing."""
        settings = load_settings()
        gemini_key = body.get("geminiApiKey") or settings.google_api_key
        rawg_key = body.get("rawgApiKey") or settings.rawg_api_key
        if not gemini_key or (data_source is None and not rawg_key):
            return None, None, KEYS_NOT_CONFIGURED
        return gemini_key, rawg_key, None

    @app.get("/favicon.ico")
    async def favicon():
        return Response(status_code=204)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/chat")
    async def chat(request: Request):
        body = await _read_body(request)
        message = body.get("message")
        if not message or not isinstance(message, str):
            return JSONResponse({"error": MESSAGE_REQUIRED}, status_code=400)

        gemini_key, rawg_key, error = resolve_keys(body)
        if error:
            return JSONResponse({"error": error}, status_code=500)

        response = await run_query(
            message,
            data_source=data_source,
            google_api_key=gemini_key,
            rawg_api_key=rawg_key,
        )
        return JSONResponse(response.model_dump())

    @app.post("/api/chat/stream")
    async def chat_stream(request: Request):
        body = await _read_body(request)
        message = body.get("message")

        async def event_generator():
            if not message or not isinstance(message, str):
                yield sse_frame("error", {"error": MESSAGE_REQUIRED})
                return

            gemini_key, rawg_key, error = resolve_keys(body)
            if error:
                yield sse_frame("error", {"error": error})
                return

            queue: asyncio.Queue = asyncio.Queue()

            async def emit(event: Dict[str, Any]):
                await queue.put(sse_frame(event["type"], event["data"]))

            async def produce():
                try:
                    await run_query_streaming(
                        message,
                        emit,
                        data_source=data_source,
                        google_api_key=gemini_key,
                        rawg_api_key=rawg_key,
                    )
                    await queue.put(sse_frame("done", {"complete": True}))
                except Exception as e:
                    print(f"DEBUG: streaming error: {str(e)}", flush=True)
                    await queue.put(sse_frame("error", {
                        "error": "An error occurred processing your request",
                        "details": str(e),
                    }))
                finally:
                    await queue.put(None)

            task = asyncio.create_task(produce())
            try:
                while True:
                    frame = await queue.get()
                    if frame is None:
                        break
                    yield frame
            except asyncio.CancelledError:
                print("DEBUG: client disconnected during stream", flush=True)
                raise
            finally:
                if not task.done():
                    task.cancel()

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    return app


app = create_app()


def main():
    import uvicorn

    settings = load_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
