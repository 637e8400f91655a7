import logging
import re

from django.db import IntegrityError, models, transaction
from rest_framework import status

from clinic.exceptions import ApiError

logger = logging.getLogger(__name__)

# Concurrent writers can compute the same successor; the loser takes the next one.
ALLOCATION_ATTEMPTS = 5


class IdentifierExhausted(ApiError):
    """Every attempt to allocate a fresh identifier collided with another writer."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Could not allocate an identifier, please retry'
    default_code = 'identifier_exhausted'


def next_identifier(model: type[models.Model], prefix: str, width: int = 3, field: str = 'id') -> str:
    """``prefix`` + the successor of the highest numeric suffix in use.

    ``P001``, ``P002``... Counting rows would reuse an id after a delete,
    so the existing suffixes are scanned instead.
    """
    pattern = re.compile(rf'^{re.escape(prefix)}(\d+)$')
    highest = 0
    for value in model.objects.filter(**{f'{field}__startswith': prefix}).values_list(field, flat=True):
        match = pattern.match(value)
        if match:
            highest = max(highest, int(match.group(1)))
    return f'{prefix}{highest + 1:0{width}d}'


def create_with_identifier(model: type[models.Model], prefix: str, **fields) -> models.Model:
    """Insert a ``model`` row under the next free ``prefix`` identifier.

    Each insert runs in its own savepoint.  A clash on the primary key
    means another transaction took that id first, so a new one is
    computed; any other integrity error is raised unchanged.
    """
    for _ in range(ALLOCATION_ATTEMPTS):
        candidate = next_identifier(model, prefix)
        try:
            with transaction.atomic():
                return model.objects.create(id=candidate, **fields)
        except IntegrityError:
            if not model.objects.filter(pk=candidate).exists():
                raise
            logger.warning('Identifier %s already taken, allocating another', candidate)
    raise IdentifierExhausted(f"Could not allocate a {model.__name__} identifier, please retry")
