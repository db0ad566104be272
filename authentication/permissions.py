from rest_framework import permissions

from .models import User


class HasRole(permissions.BasePermission):
    """
    Base permission that lets through authenticated, active users whose role
    is in ``allowed_roles``.
    """
    allowed_roles = ()
    message = 'You do not have permission to perform this action'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated or not user.is_active:
            return False
        return user.role in self.allowed_roles


class IsAdmin(HasRole):
    allowed_roles = (User.ROLE_ADMIN,)
    message = 'Admin access required'


class IsAdminOrManager(HasRole):
    allowed_roles = (User.ROLE_ADMIN, User.ROLE_MANAGER)
    message = 'Admin or manager access required'


class CanManageOrders(HasRole):
    allowed_roles = (User.ROLE_ADMIN, User.ROLE_MANAGER, User.ROLE_CASHIER, User.ROLE_WAITER)
    message = 'Order management access required'


class CanHandlePayments(HasRole):
    allowed_roles = (User.ROLE_ADMIN, User.ROLE_MANAGER, User.ROLE_CASHIER)
    message = 'Payment handling access required'


class CanManageInventory(HasRole):
    allowed_roles = (User.ROLE_ADMIN, User.ROLE_MANAGER, User.ROLE_STOCK_MANAGER)
    message = 'Inventory management access required'


class RolePermissionMixin:
    """
    Picks permission classes per HTTP method.

    ``read_permission_classes`` guard safe methods, ``write_permission_classes``
    guard POST/PUT/PATCH and ``delete_permission_classes`` (falling back to the
    write classes) guard DELETE.
    """
    read_permission_classes = (permissions.IsAuthenticated,)
    write_permission_classes = (IsAdminOrManager,)
    delete_permission_classes = None

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            classes = self.read_permission_classes
        elif self.request.method == 'DELETE':
            classes = self.delete_permission_classes or self.write_permission_classes
        else:
            classes = self.write_permission_classes
        return [permission() for permission in classes]


# Navigation entries shown to each role in the dashboard client
ROLE_NAVIGATION = {
    User.ROLE_ADMIN: [
        {'name': 'Dashboard', 'href': '/dashboard'},
        {'name': 'Orders', 'href': '/orders'},
        {'name': 'Menu', 'href': '/menu'},
        {'name': 'Tables', 'href': '/tables'},
        {'name': 'Inventory', 'href': '/inventory'},
        {'name': 'Users', 'href': '/users'},
        {'name': 'Reports', 'href': '/reports'},
        {'name': 'Settings', 'href': '/settings'},
    ],
    User.ROLE_MANAGER: [
        {'name': 'Dashboard', 'href': '/dashboard'},
        {'name': 'Orders', 'href': '/orders'},
        {'name': 'Menu', 'href': '/menu'},
        {'name': 'Tables', 'href': '/tables'},
        {'name': 'Inventory', 'href': '/inventory'},
        {'name': 'Users', 'href': '/users'},
        {'name': 'Reports', 'href': '/reports'},
    ],
    User.ROLE_CASHIER: [
        {'name': 'Dashboard', 'href': '/dashboard'},
        {'name': 'Orders', 'href': '/orders'},
        {'name': 'Tables', 'href': '/tables'},
        {'name': 'Payments', 'href': '/payments'},
    ],
    User.ROLE_WAITER: [
        {'name': 'Dashboard', 'href': '/dashboard'},
        {'name': 'Orders', 'href': '/orders'},
        {'name': 'Tables', 'href': '/tables'},
        {'name': 'Menu', 'href': '/menu'},
    ],
    User.ROLE_STOCK_MANAGER: [
        {'name': 'Dashboard', 'href': '/dashboard'},
        {'name': 'Inventory', 'href': '/inventory'},
        {'name': 'Reports', 'href': '/reports'},
    ],
}


def navigation_for(role):
    return [dict(entry) for entry in ROLE_NAVIGATION.get(role, [])]
