from typing import Annotated

from fastapi import Header, HTTPException, status


async def get_account_id(
    x_account_id: Annotated[str, Header(min_length=1, max_length=64)]
) -> str:
    """Account the request operates on, taken from the ``X-Account-Id`` header.

    Membership checks belong to the gateway in front of this service.
    """
    account_id = x_account_id.strip()
    if not account_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="X-Account-Id must not be blank"
        )
    return account_id
