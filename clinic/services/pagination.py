import math
from typing import Optional

from django.conf import settings


def paginate(qs, page: int = 1, limit: Optional[int] = None):
    """Slice ``qs`` into one page.

    Returns the page's rows and the pagination block
    ``{page, limit, total, pages}``.  ``limit`` falls back to
    ``PAGE_LIMIT_DEFAULT`` and is capped at ``PAGE_LIMIT_MAX``.
    """
    page = max(1, int(page or 1))
    limit = min(settings.PAGE_LIMIT_MAX, max(1, int(limit or settings.PAGE_LIMIT_DEFAULT)))
    total = qs.count()
    start = (page - 1) * limit
    items = list(qs[start:start + limit])
    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit),
    }
