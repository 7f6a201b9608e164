"""
Query-string parsing shared by the list endpoints.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Query, Request
from pydantic import AliasChoices, ValidationError

from ..exceptions import ValidationException, format_validation_errors
from ..models.application import ApplicationStatus
from ..schemas.pet import PetQuery
from ..services.pagination import clamp_page

LIST_FILTERS = ("species", "size")


def _query_names(field: str) -> tuple:
    alias = PetQuery.model_fields[field].validation_alias
    if isinstance(alias, AliasChoices):
        return tuple(choice for choice in alias.choices if isinstance(choice, str))
    return (field,)


def pet_query_from_request(request: Request, **overrides) -> PetQuery:
    """
    Build a PetQuery from the query string.

    ``species`` and ``size`` may be repeated or comma-separated. Keyword
    overrides replace the parameter under any of its accepted names.

    Raises:
        ValidationException: If a filter value is unknown or out of range
    """
    params = request.query_params
    raw = {key: params.get(key) for key in params.keys() if key not in LIST_FILTERS}
    for key in LIST_FILTERS:
        if key in params:
            raw[key] = params.getlist(key)
    for name, value in overrides.items():
        # a forced value beats whatever spelling the caller used
        for alias in _query_names(name):
            raw.pop(alias, None)
        raw[name] = value
    try:
        return PetQuery.model_validate(raw)
    except ValidationError as e:
        raise ValidationException(
            "Invalid pet filters",
            validation_errors=format_validation_errors(e.errors()),
        )


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int


def page_params(default_limit: int) -> Callable[..., Pagination]:
    """Dependency factory for ``page``/``limit`` with a per-endpoint default."""

    def dependency(
        page: Optional[int] = Query(None, ge=1),
        limit: Optional[int] = Query(None, ge=1),
    ) -> Pagination:
        return Pagination(*clamp_page(page, limit, default_limit))

    return dependency


def application_status_param(status: Optional[str] = Query(None)) -> Optional[ApplicationStatus]:
    """Parse an application ``status`` filter, accepting approved/rejected."""
    if not status:
        return None
    try:
        return ApplicationStatus.parse(status)
    except ValueError:
        raise ValidationException(f"Unknown application status '{status}'", field="status")
