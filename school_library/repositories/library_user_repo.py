from school_library.models.library_user import LibraryUser
from school_library.repositories.base import TenantRepo


class LibraryUserRepo(TenantRepo):
    model = LibraryUser

    def get_by_user(self, user_id: int):
        return self._query().filter(LibraryUser.user_id == user_id).first()

    def upsert_for_issue(self, user_id: int, user_type: str) -> LibraryUser:
        profile = self.get_by_user(user_id)
        if not profile:
            profile = self.add(
                LibraryUser(user_id=user_id, user_type=user_type, current_borrowed=0, total_borrowed=0)
            )
        profile.current_borrowed = (profile.current_borrowed or 0) + 1
        profile.total_borrowed = (profile.total_borrowed or 0) + 1
        return profile

    def release_for_return(self, user_id: int):
        profile = self.get_by_user(user_id)
        if profile and (profile.current_borrowed or 0) > 0:
            profile.current_borrowed -= 1
        return profile

    def count(self) -> int:
        return self._query().count()
