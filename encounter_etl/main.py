import logging

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from . import schemas
from .agent.exceptions import TransformError
from .agent.orchestrator import TransformAgent
from .config import Settings, get_settings
from .logging_config import configure_logging

from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup"""
    configure_logging(get_settings().log_level)
    logger.info("Encounter ETL API started")
    yield

# Create FastAPI application
app = FastAPI(
    title=get_settings().app_name,
    description="Clinical note → US Core Encounter transform service",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_agent(settings: Settings = Depends(get_settings)) -> TransformAgent:
    """A fresh agent per request; runs share no client state"""
    try:
        return TransformAgent(settings)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@app.get("/health", response_model=schemas.HealthResponse)
def health_check():
    """
    Health check endpoint - returns {"status": "ok"}
    """
    return {"status": "ok"}


@app.post("/transform_encounter", response_model=schemas.TransformResponse)
async def transform_encounter(
    request: schemas.TransformRequest,
    agent: TransformAgent = Depends(get_agent)
):
    """
    Transform a clinical encounter note into a US Core Encounter resource.

    Pipeline:
    1. Model drafts the resource, calling uuidv4 / fhir-validate as needed
    2. Validator diagnostics are fed back until the model answers
    3. Final answer is parsed as a JSON object

    Returns:
    - resource: the FHIR resource as produced by the model
    - rounds: number of model rounds used
    - trajectory: step-by-step audit trail (optional)

    Errors:
    - 422 if the model broke the tool/JSON contract or ran out of rounds
    - 502 if the model provider failed
    """
    result = await agent.transform(request.text)

    if not result.success:
        code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if isinstance(result.exception, TransformError)
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(status_code=code, detail=f"Transform failed: {result.error}")

    return schemas.TransformResponse(
        resource=result.resource,
        rounds=result.rounds,
        provider=agent.provider.get_provider_name(),
        model=agent.provider.get_model_name(),
        trajectory=result.trajectory.to_dict() if request.include_trajectory else None
    )
