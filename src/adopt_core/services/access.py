"""
Role and ownership predicates.

Every pet read path serializes through ``present_pet`` so that internal
notes are only ever shown to admins and to the owning rescue.
"""

import uuid
from typing import Optional, Union

from ..exceptions import AuthenticationException, AuthorizationException
from ..models.pet import Pet
from ..models.user import User, UserRole
from ..schemas.pet import PetResponse, PetStaffResponse


def can_view_internal_notes(viewer: Optional[User], pet: Pet) -> bool:
    """Whether the viewer may see the pet's internal notes."""
    if viewer is None:
        return False
    if viewer.is_admin():
        return True
    return viewer.is_rescue() and viewer.rescue_id == pet.rescue_id


def can_manage_pet(viewer: Optional[User], pet: Pet) -> bool:
    """Admins and the owning rescue may modify a pet."""
    return can_view_internal_notes(viewer, pet)


def can_view_adopted(viewer: Optional[User], rescue_id: Optional[uuid.UUID]) -> bool:
    """
    Whether a listing may include adopted pets.

    Admins always may; a rescue user only when filtering on their own rescue.
    """
    if viewer is None:
        return False
    if viewer.is_admin():
        return True
    return rescue_id is not None and viewer.is_rescue() and viewer.rescue_id == rescue_id


def present_pet(pet: Pet, viewer: Optional[User]) -> Union[PetResponse, PetStaffResponse]:
    """Serialize a pet for the given viewer."""
    if can_view_internal_notes(viewer, pet):
        return PetStaffResponse.model_validate(pet)
    return PetResponse.model_validate(pet)


def require_user(user: Optional[User]) -> User:
    """
    Raises:
        AuthenticationException: If nobody is signed in
    """
    if user is None:
        raise AuthenticationException()
    return user


def require_admin(user: Optional[User]) -> User:
    """
    Raises:
        AuthorizationException: If the user is not an admin
    """
    user = require_user(user)
    if not user.is_admin():
        raise AuthorizationException("Admin access required", required_role=UserRole.ADMIN.value)
    return user


def require_rescue(user: Optional[User]) -> uuid.UUID:
    """
    Return the rescue the user acts for.

    Raises:
        AuthorizationException: If the user is not linked to a rescue
    """
    user = require_user(user)
    if not user.is_rescue():
        raise AuthorizationException(
            "Rescue access required", required_role=UserRole.RESCUE.value
        )
    return user.rescue_id


def require_rescue_or_admin(user: Optional[User]) -> User:
    """
    Raises:
        AuthorizationException: If the user is neither an admin nor a rescue
    """
    user = require_user(user)
    if not (user.is_admin() or user.is_rescue()):
        raise AuthorizationException("Rescue or admin access required")
    return user


def ensure_can_manage_pet(user: Optional[User], pet: Pet) -> User:
    """
    Raises:
        AuthorizationException: If the user may not modify this pet
    """
    user = require_user(user)
    if not can_manage_pet(user, pet):
        raise AuthorizationException("You do not have permission to modify this pet")
    return user
