from fastapi.encoders import jsonable_encoder


def success_response(message: str, data=None, **extra) -> dict:
    """Uniform ``{success, message, data}`` envelope for every endpoint."""
    body = {"success": True, "message": message, "data": jsonable_encoder(data)}
    body.update(extra)
    return body


def error_response(message: str, errors: list | None = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = jsonable_encoder(errors)
    return body


def dump(schema, obj) -> dict:
    return schema.model_validate(obj).model_dump(mode="json", by_alias=True)


def pagination(page: int, limit: int, total: int) -> dict:
    total_pages = (total + limit - 1) // limit
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }
