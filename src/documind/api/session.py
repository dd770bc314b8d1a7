"""API router exposing the onboarding, assurance and chat steps."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from documind.errors import InitFailure, ParseFailure, SessionBusyError
from documind.session.models import Message, Persona
from documind.session.service import SessionService, SessionSnapshot, get_session_service

router = APIRouter(prefix="/session", tags=["session"])


class PersonaPayload(BaseModel):
    """Persona fields; blank values are accepted but block uploads."""

    domain: str = Field("", description="Professional domain, e.g. Finance.")
    industry: str = Field("", description="Industry, e.g. Banking.")
    role: str = Field("", description="Role of the person asking, e.g. Senior Analyst.")
    doc_title: str = Field("", description="Title of the document to be uploaded.")
    doc_topic: str = Field("", description="Topic of the document.")

    def to_persona(self) -> Persona:
        return Persona(
            domain=self.domain,
            industry=self.industry,
            role=self.role,
            doc_title=self.doc_title,
            doc_topic=self.doc_topic,
        )


class ConfirmRequest(BaseModel):
    api_key: str | None = Field(None, description="Overrides the configured provider API key.")


class SendRequest(BaseModel):
    text: str = Field(..., description="Question to ask about the document.")


class MessageItem(BaseModel):
    id: str
    role: str
    text: str
    timestamp: int


class SessionResponse(BaseModel):
    """Current session view returned by every endpoint."""

    session_id: str
    state: str
    accepted: bool = True
    persona: PersonaPayload
    persona_complete: bool
    file_name: str | None
    page_count: int
    toc: list[str]
    messages: list[MessageItem]
    busy: bool


def _serialise_message(message: Message) -> MessageItem:
    return MessageItem(
        id=message.id, role=message.role.value, text=message.text, timestamp=message.timestamp
    )


def _serialise(snapshot: SessionSnapshot, *, accepted: bool = True) -> SessionResponse:
    persona = snapshot.persona
    return SessionResponse(
        session_id=snapshot.session_id,
        state=snapshot.state.value,
        accepted=accepted,
        persona=PersonaPayload(
            domain=persona.domain,
            industry=persona.industry,
            role=persona.role,
            doc_title=persona.doc_title,
            doc_topic=persona.doc_topic,
        ),
        persona_complete=persona.is_complete(),
        file_name=snapshot.file_name,
        page_count=snapshot.page_count,
        toc=list(snapshot.toc),
        messages=[_serialise_message(message) for message in snapshot.messages],
        busy=snapshot.busy,
    )


@router.get("", response_model=SessionResponse)
def read_session(service: SessionService = Depends(get_session_service)) -> SessionResponse:
    """Return the current step, outline and conversation."""

    return _serialise(service.snapshot())


@router.put("/persona", response_model=SessionResponse)
async def update_persona(
    payload: PersonaPayload,
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Replace the persona while the session is still onboarding."""

    accepted = service.update_persona(payload.to_persona())
    return _serialise(service.snapshot(), accepted=accepted)


@router.post("/upload", response_model=SessionResponse)
async def upload_document(
    file: UploadFile = File(...),
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Parse the uploaded document and move to the assurance step."""

    data = await file.read()
    try:
        document = await service.upload(data, file.filename or "document.pdf", file.content_type)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ParseFailure as exc:
        raise HTTPException(
            status_code=422, detail="Error parsing the document. Please try a valid PDF file."
        ) from exc
    return _serialise(service.snapshot(), accepted=document is not None)


@router.post("/retake", response_model=SessionResponse)
async def retake(service: SessionService = Depends(get_session_service)) -> SessionResponse:
    """Discard the parsed document and return to onboarding."""

    try:
        accepted = service.retake()
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _serialise(service.snapshot(), accepted=accepted)


@router.post("/confirm", response_model=SessionResponse)
async def confirm(
    request: ConfirmRequest | None = None,
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Confirm the outline and start the grounded chat."""

    credential = request.api_key if request is not None else None
    try:
        accepted = await service.confirm(credential)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InitFailure as exc:
        raise HTTPException(
            status_code=502, detail="Failed to initialize AI. Check your API Key."
        ) from exc
    return _serialise(service.snapshot(), accepted=accepted)


@router.post("/messages", response_model=SessionResponse)
async def send_message(
    request: SendRequest,
    service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Ask a question; provider failures come back as an apology message."""

    try:
        reply = await service.send(request.text)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _serialise(service.snapshot(), accepted=reply is not None)
