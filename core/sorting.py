"""
sortBy / sortOrder handling. Each resource declares the API sort keys it accepts and
the ORM field each maps to; anything else is rejected with a validation error.
"""
from rest_framework.exceptions import ValidationError


def resolve_ordering(params, allowed, default='createdAt', default_order='desc'):
    """
    allowed: {'createdAt': 'created_at', 'name': 'name', ...}
    Returns an order_by() argument such as '-created_at'.
    """
    sort_by = params.get('sortBy') or default
    sort_order = (params.get('sortOrder') or default_order).lower()
    if sort_by not in allowed:
        raise ValidationError({
            'sortBy': [f'Must be one of: {", ".join(sorted(allowed))}'],
        })
    if sort_order not in ('asc', 'desc'):
        raise ValidationError({'sortOrder': ['Must be asc or desc']})
    field = allowed[sort_by]
    return f'-{field}' if sort_order == 'desc' else field
