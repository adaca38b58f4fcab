from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse, Response

from speech_api.config import Settings, get_settings
from speech_api.dependencies import get_speech_handler
from speech_api.schemas.speech import ErrorResponse, SpeechResponse
from speech_api.services.speech_handler import HandlerResult, SpeechRequestHandler

router = APIRouter(prefix="/api/v1", tags=["tts"])


def _to_response(result: HandlerResult) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return ORJSONResponse(result.body, status_code=result.status_code, headers=result.headers)


@router.options("/tts", include_in_schema=False)
async def preflight(request: Request, settings: Settings = Depends(get_settings)) -> Response:
    result = SpeechRequestHandler.preflight(settings.cors_allow_origins, request.headers.get("origin"))
    return _to_response(result)


@router.post(
    "/tts",
    responses={
        200: {"model": SpeechResponse},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def synthesize(request: Request, handler: SpeechRequestHandler = Depends(get_speech_handler)) -> Response:
    """
    Synthesize text, store the audio and return a playable URL.

    Body: ``{"text": str, "voiceId"?: str, "userId"?: str}``. The body is read
    raw so malformed JSON yields a 400 with a message instead of a 422.
    """
    body = await request.body()
    result = await handler.handle(request.method, body, origin=request.headers.get("origin"))
    return _to_response(result)
