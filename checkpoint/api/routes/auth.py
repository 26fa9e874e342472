# =======================================================================================
# checkpoint/api/routes/auth.py - Remote Service Authentication Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, status
from ...clients.api_client import ApiClient
from ...models.schemas import LoginRequest, LoginResponse
from ..dependencies import get_api_client

router = APIRouter()

@router.post("/auth/login", response_model=LoginResponse)
async def login(request: LoginRequest, client: ApiClient = Depends(get_api_client)):
    """Sign the checkpoint in against the remote service; tokens stay on the device."""
    payload = await client.login(request.email, request.password)
    user = payload.get("user") if isinstance(payload, dict) else None
    return LoginResponse(authenticated=True, user=user)

@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(client: ApiClient = Depends(get_api_client)):
    await client.logout()
