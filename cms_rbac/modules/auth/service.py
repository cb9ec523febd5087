from supabase import Client
from fastapi import HTTPException

from cms_rbac.modules.users.schemas import Actor
from cms_rbac.modules.users.store import UserStore


class AuthService:
    def __init__(self, supabase: Client, user_store: UserStore):
        self.supabase = supabase
        self.user_store = user_store

    def authenticate(self, token: str) -> Actor:
        """Resolve a Supabase Auth access token to the CMS user it belongs to"""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        actor = self.user_store.find_by_id(user_response.user.id)
        if actor is None:
            raise HTTPException(status_code=401, detail="User is not registered in the CMS")
        return actor
