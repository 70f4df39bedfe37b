from school_library.repositories.user_repo import UserRepo
from school_library.services.base import TenantService


class UserService(TenantService):
    def search_users(self, text: str, user_type: str = None):
        text = (text or "").strip()
        if len(text) < 2:
            return []
        return UserRepo(self.session, self.tenant_id).search(text, user_type=user_type)
