# hotel_ledger/routers.py
from typing import Callable, List, Optional, Sequence

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from .crud import create_record, delete_record, get_record, list_records, update_record
from .database import get_db


def crud_router(
    prefix: str,
    model,
    schema_in,
    schema_update,
    schema_out,
    filter_fields: Sequence[str] = (),
    creator: Optional[Callable] = None,
    updater: Optional[Callable] = None,
    with_create: bool = True,
) -> APIRouter:
    """List/get/create/update/delete endpoints for one collection."""
    router = APIRouter(prefix=prefix, tags=[model.__tablename__])
    collection = model.__tablename__

    @router.get("", response_model=List[schema_out], name=f"list_{collection}")
    def list_(request: Request, db: Session = Depends(get_db)):
        filters = {f: request.query_params.get(f) for f in filter_fields}
        return list_records(db, model, **filters)

    @router.get("/{record_id}", response_model=schema_out, name=f"get_{collection}")
    def get_(record_id: str, db: Session = Depends(get_db)):
        return get_record(db, model, record_id)

    if with_create:
        @router.post("", response_model=schema_out, status_code=201, name=f"create_{collection}")
        def create_(payload: schema_in, db: Session = Depends(get_db)):
            data = payload.model_dump()
            if creator is not None:
                return creator(db, model, data)
            return create_record(db, model, data)

    @router.patch("/{record_id}", response_model=schema_out, name=f"update_{collection}")
    def update_(record_id: str, payload: schema_update, db: Session = Depends(get_db)):
        changes = payload.model_dump(exclude_unset=True)
        if updater is not None:
            return updater(db, model, record_id, changes)
        return update_record(db, model, record_id, changes)

    @router.delete("/{record_id}", status_code=204, name=f"delete_{collection}")
    def delete_(record_id: str, db: Session = Depends(get_db)):
        delete_record(db, model, record_id)
        return Response(status_code=204)

    return router
