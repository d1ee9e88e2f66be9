import logging
import os

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from reporthub.api import auth, dashboard, orders, quote, reports, validate, workflow_api
from reporthub.config import Settings
from reporthub.context import AppContext, get_context

settings = Settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Report Hub")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(quote.router, prefix="/quote", tags=["quote"])
app.include_router(validate.router, prefix="/validate", tags=["validate"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(orders.router, prefix="/orders", tags=["orders"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
app.include_router(workflow_api.router, prefix="", tags=["workflow"])


@app.on_event("startup")
def on_startup():
    # a context installed before startup (tests, embedding servers) wins
    if getattr(app.state, "context", None) is None:
        app.state.context = AppContext.create(settings)
    logger.info("Report Hub started")


@app.on_event("shutdown")
def on_shutdown():
    ctx = getattr(app.state, "context", None)
    if ctx is not None:
        ctx.close()
        app.state.context = None


@app.get("/")
async def root():
    return {"status": "ok", "service": "report-hub"}


@app.get("/files/{user_id}/{filename}")
async def generated_file(user_id: int, filename: str, ctx: AppContext = Depends(get_context)):
    if os.path.basename(filename) != filename or not filename.endswith(".html"):
        raise HTTPException(status_code=404, detail="File not found")
    path = os.path.join(ctx.settings.storage_dir, str(user_id), filename)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, media_type="text/html")
