# medmentor/api/advisor.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from medmentor.api.deps import get_gateway, get_repo, get_settings
from medmentor.core.config import Settings
from medmentor.runtime.flow import make_advisor_flow
from medmentor.schemas.chat import AdvisorRequest, AdvisorResponse, ErrorOut
from medmentor.services.errors import QuotaExhausted, RateLimited
from medmentor.services.repo import Repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["advisor"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        ErrorOut(error=message).model_dump(), status_code=status_code, headers=CORS_HEADERS
    )


@router.options("/drug-advisor")
async def drug_advisor_preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post(
    "/drug-advisor",
    response_model=AdvisorResponse,
    responses={429: {"model": ErrorOut}, 402: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def drug_advisor(
    request: Request,
    repo: Repo = Depends(get_repo),
    settings: Settings = Depends(get_settings),
):
    """
    Answer the latest question in a conversation:
    1. Look up matching interaction facts and build the system prompt
    2. Call the model gateway with a forced structured tool call
    3. Return {response, confidence_level, evidence_sources}
    """
    try:
        payload = AdvisorRequest.model_validate(await request.json())
        logger.info("Received messages: %d", len(payload.messages))

        shared: Dict[str, Any] = {
            "repo": repo,
            "settings": settings,
            "gateway": get_gateway(request),
            "messages": [m.model_dump() for m in payload.messages],
        }
        await make_advisor_flow().run_async(shared)
        logger.info("Retrieval context length: %d", len(shared["system_prompt"]))

        logger.info("Returning structured response")
        return JSONResponse(shared["response_payload"], headers=CORS_HEADERS)

    except RateLimited as e:
        return _error(429, e.user_message)
    except QuotaExhausted as e:
        return _error(402, e.user_message)
    except Exception as e:
        logger.exception("Error in drug-advisor function")
        return _error(500, str(e) or "Unknown error")
