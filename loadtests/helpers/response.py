"""Readable failure messages from food court API error responses.

Shapes handled:
- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- Domain validation (400): {"error": {"field": ["msg", ...]}}
- Other domain errors (400/404/409/502): {"error": "msg"}
"""


def extract_error_detail(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return (getattr(response, "text", "") or "(empty response body)")[:300]

    if isinstance(body.get("detail"), list):
        return " | ".join(
            f"{'.'.join(str(p) for p in err.get('loc', []))}: {err.get('msg', err)}" for err in body["detail"]
        )

    error = body.get("error")
    if isinstance(error, dict):
        return " | ".join(f"{field}: {messages}" for field, messages in error.items())
    if error is not None:
        return str(error)
    return str(body)[:300]
