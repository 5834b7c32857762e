from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from benchcore import __version__

from .routes.comparisons import router as comparisons_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("dashboard")

app = FastAPI(
    title="JMH Provider Comparison API",
    description="Paired JMH results for two crypto providers, organized as a drill-down tree.",
    version=__version__,
)

# Register API routes
app.include_router(comparisons_router)

# CORS: explicit origins for credentialed requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Root ─────────────────────────────────────────────────────────────────────

@app.get("/")
def read_root():
    return {"status": "online", "system": "JMH Provider Comparison", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting dashboard API on 127.0.0.1:8000")
    uvicorn.run("dashboard.backend.main:app", host="127.0.0.1", port=8000, log_level="info")
