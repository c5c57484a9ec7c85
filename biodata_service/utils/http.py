from typing import Any

import orjson
from fastapi.responses import JSONResponse

__all__ = ["OrjsonResponse", "error_response"]


class OrjsonResponse(JSONResponse):
    """JSON response rendered with orjson (datetimes as ISO 8601, non-str keys allowed)."""

    def render(self, content: Any) -> bytes:
        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)


def error_response(status_code: int, detail: str) -> OrjsonResponse:
    return OrjsonResponse(status_code=status_code, content={"detail": detail})
