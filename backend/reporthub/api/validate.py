from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from reporthub.context import AppContext, get_context

router = APIRouter()


class ValidateRequest(BaseModel):
    data: Dict[str, Any]


@router.post("/report")
async def validate_report(req: ValidateRequest, ctx: AppContext = Depends(get_context)):
    return ctx.validator.validate_report(req.data)


@router.post("/order")
async def validate_order(req: ValidateRequest, ctx: AppContext = Depends(get_context)):
    return ctx.validator.validate_order(req.data)
