from typing import Any, List, Optional

from fastapi import APIRouter, Body, status

from db_studio.api.dependencies import CatalogDep, MutatorDep, PaginatorDep
from db_studio.models.row import RowRecord
from db_studio.models.schema import ColumnDescriptor, TableDescriptor

router = APIRouter(prefix="/tables", tags=["Tables"])


def _lenient_int(value: Optional[str]) -> Optional[int]:
    # Unparseable query values fall back to the defaults, like missing ones
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


# Tables and views with live row counts
@router.get("", response_model=List[TableDescriptor], status_code=status.HTTP_200_OK)
async def list_tables(catalog: CatalogDep):
    return await catalog.list_tables()


@router.get("/{name}/schema", response_model=List[ColumnDescriptor])
async def get_table_schema(name: str, catalog: CatalogDep):
    return await catalog.describe_table(name)


# One page of rows, total counted separately
@router.get("/{name}/data")
async def get_table_data(
    name: str,
    paginator: PaginatorDep,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
):
    page = await paginator.page(name, _lenient_int(limit), _lenient_int(offset))
    return page.to_json_dict()


@router.post("/{name}/rows")
async def insert_row(
    name: str, mutator: MutatorDep, values: dict[str, Any] = Body(...)
):
    await mutator.insert_row(name, RowRecord.from_mapping(values))
    return {"success": True}


@router.put("/{name}/rows/{row_id}")
async def update_row(
    name: str, row_id: str, mutator: MutatorDep, values: dict[str, Any] = Body(...)
):
    await mutator.update_row(name, row_id, RowRecord.from_mapping(values))
    return {"success": True}


@router.delete("/{name}/rows/{row_id}")
async def delete_row(name: str, row_id: str, mutator: MutatorDep):
    await mutator.delete_row(name, row_id)
    return {"success": True}
