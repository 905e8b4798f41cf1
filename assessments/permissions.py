from rest_framework import permissions

class IsActiveTeacher(permissions.BasePermission):
    """
    Allows access to active users with the teacher role.
    Administrators manage exams but do not take them.
    """
    message = "Only teachers can take exams."

    def has_permission(self, request, view):
        # 1. User must be logged in
        if not request.user or not request.user.is_authenticated:
            return False

        # 2. Check Role
        return request.user.is_active and getattr(request.user, 'role', '') == 'teacher'
