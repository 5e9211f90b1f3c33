from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from agents import AgentDependencies, AgentHTTPClient
from config import check_api_keys_on_startup, logger, settings
from ensemble import CredibilityScorer
from exceptions import VerificationEngineException
from middleware.context import RequestContextMiddleware
from models.requests import VerificationRequest
from models.verdicts import EnsembleVerdict
from registry import AgentRegistry
from services import VerificationService, build_cache_store

app = FastAPI(title="Verdict Engine")

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    check_api_keys_on_startup()
    http_client = AgentHTTPClient()
    deps = AgentDependencies(settings=settings, http=http_client, credibility=CredibilityScorer())
    # a misconfigured weight table raises here and aborts startup
    registry = AgentRegistry.from_file(settings.AGENT_WEIGHTS_PATH, deps=deps)
    cache = build_cache_store(settings)

    app.state.http_client = http_client
    app.state.cache = cache
    app.state.service = VerificationService(registry, cache=cache, active_settings=settings)
    logger.info("Verification engine started.")


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.cache.close()
    await app.state.http_client.aclose()
    logger.info("Verification engine stopped.")


@app.get("/")
async def health_check():
    return {"status": "ok", "message": "Verdict engine is running."}


@app.get("/agents")
async def list_agents(request: Request):
    registry = request.app.state.service.registry
    return {
        "version": registry.version,
        "agents": [
            {
                "id": d.id,
                "tier": d.tier.value,
                "weight": d.weight,
                "applies_to": sorted(c.value for c in d.applies_to),
                "timeout_seconds": d.timeout,
            }
            for d in registry.descriptors
        ],
    }


@app.post("/verify", response_model=EnsembleVerdict)
async def verify(body: VerificationRequest, request: Request) -> EnsembleVerdict:
    """Run every applicable agent on the content and return the ensemble verdict."""
    try:
        return await request.app.state.service.verify_content(body)
    except VerificationEngineException as e:
        logger.error(f"Verification failed: {e.message}")
        raise HTTPException(status_code=500, detail=e.to_dict())
