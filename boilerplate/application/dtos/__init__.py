"""Data Transfer Objects for application layer."""

from boilerplate.application.dtos.user_dto import CreateUserDTO, UpdateUserDTO, UserDTO

__all__ = ["CreateUserDTO", "UpdateUserDTO", "UserDTO"]
