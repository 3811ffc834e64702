"""User API endpoints."""

from fastapi import APIRouter, Depends, Query, status

from boilerplate.application.dtos.user_dto import CreateUserDTO, UpdateUserDTO, UserDTO
from boilerplate.application.services.user_service import UserService
from boilerplate.presentation.dependencies import get_user_service
from boilerplate.presentation.error_schemas import ErrorResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user",
    description="Create a new user with a unique email address.",
    responses={409: {"model": ErrorResponse, "description": "Email already exists"}},
)
async def create_user(
    dto: CreateUserDTO,
    service: UserService = Depends(get_user_service),
) -> UserDTO:
    """
    Create a new user.

    Exception handling is done by global exception handlers.
    The service layer raises AppError, which is automatically converted
    to the appropriate HTTP response.
    """
    return await service.create_user(dto)


@router.get(
    "",
    response_model=list[UserDTO],
    summary="List users",
    description="Retrieve users newest first, with limit/offset pagination.",
)
async def list_users(
    limit: int = Query(default=100, ge=0, description="Maximum number of users"),
    offset: int = Query(default=0, ge=0, description="Number of users to skip"),
    service: UserService = Depends(get_user_service),
) -> list[UserDTO]:
    """Get a page of users."""
    return await service.list_users(limit=limit, offset=offset)


@router.get(
    "/email/{email}",
    response_model=UserDTO,
    summary="Get user by email",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def get_user_by_email(
    email: str,
    service: UserService = Depends(get_user_service),
) -> UserDTO:
    """Get user by email address."""
    return await service.get_user_by_email(email)


@router.get(
    "/{user_id}",
    response_model=UserDTO,
    summary="Get user by ID",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def get_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> UserDTO:
    """Get user by ID."""
    return await service.get_user_by_id(user_id)


@router.put(
    "/{user_id}",
    response_model=UserDTO,
    summary="Update user",
    description="Change the email address of a user.",
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Email already exists"},
    },
)
async def update_user(
    user_id: int,
    dto: UpdateUserDTO,
    service: UserService = Depends(get_user_service),
) -> UserDTO:
    """Update user."""
    return await service.update_user(user_id, dto)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete a user by ID. Deleting a missing user also succeeds.",
)
async def delete_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
) -> None:
    """Delete user."""
    await service.delete_user(user_id)
