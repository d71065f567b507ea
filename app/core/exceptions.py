from fastapi import status


class PeerReadsError(Exception):
    """Error de dominio; el handler global lo traduce a la respuesta HTTP."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(PeerReadsError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(PeerReadsError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(PeerReadsError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PeerReadsError):
    status_code = status.HTTP_404_NOT_FOUND
