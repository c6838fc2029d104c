from rest_framework import permissions


class IsCafeOwner(permissions.BasePermission):
    message = "Only the owner of this cafe can change it."

    def has_object_permission(self, request, view, obj):
        return obj.owner_id == request.user.id
