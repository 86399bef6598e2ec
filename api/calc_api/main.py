"""FastAPI app with Strawberry GraphQL."""

from contextlib import asynccontextmanager

from calcengine import configure_logging
from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter

from calc_api.schema import schema
from calc_api.services import engine_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = engine_config()
    configure_logging(level=config.log_level, format_json=config.log_json)
    yield


app = FastAPI(title="Calculation API", version="0.1.0", lifespan=lifespan)
graphql_app = GraphQLRouter(schema)
app.include_router(graphql_app, prefix="/graphql")


@app.get("/health")
def health() -> dict[str, str]:
    """Health check for load balancers and Docker."""
    return {"status": "ok"}
