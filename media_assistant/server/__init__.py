"""HTTP API for the file tools (FastAPI app, job store, schemas)."""
