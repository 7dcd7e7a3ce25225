from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from disc_specs.core.database import get_db
from disc_specs.dtos.technical_spec_dto import DiscFormat, SpecLookupResponse
from disc_specs.services.spec_lookup_service import SpecLookupService

router = APIRouter(prefix="/specs", tags=["specs"])


@router.get("", response_model=SpecLookupResponse)
async def get_specs(
    title: str,
    year: int | None = None,
    disc_format: DiscFormat | None = None,
    db: Session = Depends(get_db),
):
    result = SpecLookupService(db).lookup(title, year, disc_format)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No specs stored for {title}")
    return result
