from fastapi.responses import PlainTextResponse

from domain.model.result import OperationResult


def to_response(result: OperationResult) -> PlainTextResponse:
    """Write an OperationResult out as a plain-text response."""
    return PlainTextResponse(content=result.body, status_code=int(result.status))
