"""
Staff account endpoints.

Administrators manage accounts; any staff member may look up colleagues
and the doctor / nurse rosters.  Deleting an account deactivates it.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinical.models import User
from clinical.permissions import IsAdminRole, IsStaff
from clinical.serializers.user import UserCreateSerializer, UserListQuerySerializer, UserUpdateSerializer
from clinical.services import users as svc
from clinical.views.common import outcome_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def users_collection(request):
    if request.method == 'GET':
        q = UserListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response([svc.format_user(u) for u in svc.list_users(q.validated_data.get('role'))])

    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = svc.create_user(actor=request.user, **s.validated_data)
    return Response(svc.format_user(user), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def doctors(request):
    return Response([svc.format_user(u) for u in svc.list_users(User.ROLE_DOCTOR)])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaff])
def nurses(request):
    return Response([svc.format_user(u) for u in svc.list_users(User.ROLE_NURSE)])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    return Response(svc.format_user(request.user))


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaff])
def user_detail(request, user_id: int):
    if request.method == 'GET':
        user = svc.get_active_user(user_id)
        if user is None:
            raise NotFound('user not found')
        return Response(svc.format_user(user))

    if not IsAdminRole().has_permission(request, None):
        raise PermissionDenied('only administrators may manage accounts')
    if request.method == 'DELETE':
        outcome = svc.deactivate_user(user_id, actor=request.user)
        return outcome_response(outcome, success_status=status.HTTP_204_NO_CONTENT)

    s = UserUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    outcome = svc.update_user(user_id, s.validated_data, actor=request.user)
    return outcome_response(outcome, svc.format_user(outcome.value) if outcome.ok else None)
