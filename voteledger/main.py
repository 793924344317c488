# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import Settings
from .election import Election, create_election
from .errors import ElectionError, status_code_for
from .routes.election_routes import router as election_router
from .routes.payment_routes import payment_router
from .routes.vote_routes import vote_router
from .storage import StateFile, attach_state_file
from .storage_mongo import MongoEventSink

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, election: Election = None, clock=None) -> FastAPI:
    settings = settings if settings is not None else Settings()
    logging.basicConfig(level=settings.log_level)

    if election is None:
        sinks = []
        if settings.mongo_uri:
            sinks.append(MongoEventSink.connect(settings.mongo_uri, settings.mongo_db))
        election = create_election(settings, clock=clock, sinks=sinks)
        if settings.state_path:
            attach_state_file(election, StateFile(settings.state_path))

    app = FastAPI(title="voteledger - Fee-gated election API")
    app.state.settings = settings
    app.state.election = election

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ElectionError)
    async def election_error_handler(request: Request, exc: ElectionError):
        status_code = status_code_for(exc)
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    app.include_router(election_router)
    app.include_router(vote_router)
    app.include_router(payment_router)

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": "Welcome to the voteledger election API"}

    @app.get("/health", tags=["Root"])
    def health_check():
        with election.transactions.reading():
            phase = election.controller.phase()
            events = len(election.events)
        return {"status": "healthy", "phase": phase.value, "events": events}

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    return app


app = create_app()
