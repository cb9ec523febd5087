"""
FastAPI dependencies: request -> context/actor/services.
The context and Supabase client live on app.state, set up by create_app.
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from cms_rbac.core.context import AccessContext
from cms_rbac.modules.auth.service import AuthService
from cms_rbac.modules.roles.service import RoleService
from cms_rbac.modules.users.schemas import Actor
from cms_rbac.modules.users.service import UserRoleService

security = HTTPBearer()


def get_context(request: Request) -> AccessContext:
    return request.app.state.access_context


def get_supabase(request: Request) -> Client:
    return request.app.state.supabase


def authenticate(
    credentials: HTTPAuthorizationCredentials = Security(security),
    supabase: Client = Depends(get_supabase),
    ctx: AccessContext = Depends(get_context)
) -> Actor:
    """Bearer token -> Actor"""
    return AuthService(supabase, ctx.user_store).authenticate(credentials.credentials)


def get_role_service(ctx: AccessContext = Depends(get_context)) -> RoleService:
    return RoleService(ctx)


def get_user_role_service(ctx: AccessContext = Depends(get_context)) -> UserRoleService:
    return UserRoleService(ctx)
