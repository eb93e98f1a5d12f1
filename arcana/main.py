import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arcana import config
from arcana.deck import validate_deck
from arcana.routes.deck_routes import router as deck_router
from arcana.routes.session_routes import router as session_router

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO))
log = logging.getLogger("arcana")

app = FastAPI(title="Arcana Atelier", version="0.1.0")

app.include_router(deck_router)
app.include_router(session_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fail at startup rather than on the first draw
validate_deck()
log.info("deck loaded, default variant=%s spread=%s", config.DEFAULT_VARIANT, config.DEFAULT_SPREAD)


@app.get("/health")
def health():
    return {"ok": True}
