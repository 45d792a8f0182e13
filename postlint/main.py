from contextlib import asynccontextmanager

from fastapi import FastAPI

from .routers import posts
from .services import front_matter


@asynccontextmanager
async def lifespan(_: FastAPI):
    front_matter.refresh_cache()
    yield


app = FastAPI(title="postlint", lifespan=lifespan)

app.include_router(posts.router)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
