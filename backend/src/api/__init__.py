"""HTTP layer: FastAPI app, dependencies and routers."""
