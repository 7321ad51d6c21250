"""Translate domain exceptions into HTTP errors"""

from fastapi import HTTPException

from banking_service.domain.exceptions import DomainException


def http_error(status_code: int, exc: DomainException) -> HTTPException:
    """HTTPException carrying the exception's stable code and message"""
    return HTTPException(status_code=status_code, detail={"code": exc.code, "message": str(exc)})
