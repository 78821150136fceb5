from typing import Any

from fastapi.responses import JSONResponse

from .sanitizer import sanitize_output


class SanitizedJSONResponse(JSONResponse):
    """JSON response whose string values are stripped of markup on render."""

    def render(self, content: Any) -> bytes:
        return super().render(sanitize_output(content))
