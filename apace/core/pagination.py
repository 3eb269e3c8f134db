import math


def paginate(query, page: int, limit: int):
    """
    Apply offset/limit paging to a query.

    Returns:
        (items, meta) where meta is the pagination block rendered to clients
    """
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    meta = {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
    return items, meta
