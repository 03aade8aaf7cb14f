"""User administration errors; each carries the HTTP status it maps to."""

from __future__ import annotations


class UserAdminError(Exception):
    """Base exception for user administration errors."""

    status_code = 400


class UserNotFoundError(UserAdminError):
    status_code = 404

    def __init__(self, message: str = "Usuário não encontrado"):
        super().__init__(message)


class CompanyNotFoundError(UserAdminError):
    def __init__(self, message: str = "Empresa não encontrada"):
        super().__init__(message)


class DuplicateEmailError(UserAdminError):
    status_code = 409

    def __init__(self, message: str = "Email já está em uso por outro usuário"):
        super().__init__(message)


class LastAdminDeletionError(UserAdminError):
    """Deleting the only admin account."""

    def __init__(self, message: str = "Não é possível excluir o último administrador do sistema"):
        super().__init__(message)


class InvalidUserDataError(UserAdminError):
    """Missing fields, bad email, short password or unknown role."""


class InvalidCredentialsError(UserAdminError):
    status_code = 401

    def __init__(self, message: str = "Email ou senha inválidos"):
        super().__init__(message)
