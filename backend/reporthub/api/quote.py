import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from reporthub.context import AppContext, get_context

logger = logging.getLogger(__name__)
router = APIRouter()


class QuoteRequest(BaseModel):
    pages: int
    print_side: str = "double"
    binding: bool = True
    cover: bool = True


@router.post("/")
async def quote(req: QuoteRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
    validation = ctx.validator.validate_print_options(req.model_dump())
    if not validation["ok"]:
        raise HTTPException(status_code=422, detail=validation["issues"])

    result = ctx.pricing.quote(req.pages, req.print_side, req.binding, req.cover)
    logger.debug("Quote pages=%s side=%s => %s", req.pages, req.print_side, result.total)
    return result.as_dict()
