from rest_framework import permissions


class RolePermission(permissions.BasePermission):
    """
    Allows access only to authenticated users holding one of `allowed_roles`.
    Superusers are treated as admins.
    """
    allowed_roles = ()
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_superuser and 'admin' in self.allowed_roles:
            return True
        return getattr(user, 'role', None) in self.allowed_roles


class IsHousehold(RolePermission):
    """
    Allows access only to household accounts.
    """
    allowed_roles = ('household',)
    message = "Only household accounts can perform this action."


class IsCollector(RolePermission):
    """
    Allows access only to collector accounts.
    """
    allowed_roles = ('collector',)
    message = "Only collectors can review bags."


class IsReceiver(RolePermission):
    allowed_roles = ('receiver',)
    message = "Only receivers can verify collector reviews."


class IsAdmin(RolePermission):
    """
    Allows access only to admin users.
    """
    allowed_roles = ('admin',)
    message = "Only administrators can access this resource."


class IsStaffRole(RolePermission):
    """
    Collectors, receivers and admins: anyone who handles bags after activation.
    """
    allowed_roles = ('collector', 'receiver', 'admin')
