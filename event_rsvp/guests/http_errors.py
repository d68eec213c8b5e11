from fastapi import HTTPException, status

from event_rsvp.errors import (
    CapacityExceededError,
    DeadlinePassedError,
    GuestAlreadyExistsError,
    InvalidRequestError,
    NotFoundError,
    RsvpError,
    StorageError,
)


def to_http_exception(error: RsvpError) -> HTTPException:
    """Map an engine error onto the response the routers return for it."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, GuestAlreadyExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, CapacityExceededError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(error), "allowed_additional": error.allowed_additional},
        )
    if isinstance(error, (InvalidRequestError, DeadlinePassedError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, StorageError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save changes"
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
