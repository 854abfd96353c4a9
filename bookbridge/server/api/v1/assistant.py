"""Ask-AI endpoint for study doubts."""

from fastapi import APIRouter

from bookbridge.core.models.io.assistant import AskRequest, AskResponse
from bookbridge.server.services.deps import AssistantServiceDep

router = APIRouter()


@router.post(
    "/ask",
    response_model=AskResponse,
    summary="Ask a Study Question",
    description="Answer a study doubt with the configured language model.",
    responses={503: {"description": "No assistant model configured"}},
)
async def ask(payload: AskRequest, assistant: AssistantServiceDep) -> AskResponse:
    return AskResponse(answer=await assistant.ask(payload.question))
