# =======================================================================================
# checkpoint/api/routes/employees.py - Directory Endpoints
# =======================================================================================
from typing import List
from fastapi import APIRouter, Depends, Query
from ...models.schemas import Identity
from ...services.fallback import FallbackCoordinator
from ..dependencies import get_coordinator

router = APIRouter()

@router.get("/employees", response_model=List[Identity])
async def list_employees(coordinator: FallbackCoordinator = Depends(get_coordinator)):
    return await coordinator.list_identities()

@router.get("/employees/search", response_model=List[Identity])
async def search_employees(
    q: str = Query("", description="Matches name, email or department"),
    coordinator: FallbackCoordinator = Depends(get_coordinator),
):
    return await coordinator.search_identities(q)

@router.get("/employees/department/{department}", response_model=List[Identity])
async def employees_by_department(department: str, coordinator: FallbackCoordinator = Depends(get_coordinator)):
    return await coordinator.identities_by_department(department)

@router.get("/employees/{identity_id}", response_model=Identity)
async def get_employee(identity_id: str, coordinator: FallbackCoordinator = Depends(get_coordinator)):
    return await coordinator.get_identity(identity_id)
