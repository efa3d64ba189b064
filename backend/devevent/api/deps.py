"""
Request dependencies.

Authentication happens upstream. The auth layer verifies the session and
forwards the attendee's email in the X-Attendee-Email header; this service
treats that value as the booking identity key.
"""

from typing import Optional

from fastapi import Header, HTTPException, status

ATTENDEE_HEADER = "X-Attendee-Email"


async def get_attendee_email(
    x_attendee_email: Optional[str] = Header(default=None, alias=ATTENDEE_HEADER),
) -> str:
    if not x_attendee_email or not x_attendee_email.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing attendee identity",
        )
    return x_attendee_email
