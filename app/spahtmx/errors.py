"""
Error taxonomy shared by repositories, services and handlers.

Repositories raise these; services let them through; the app factory maps
them to HTTP responses using ``status_code``.
"""


class AppError(RuntimeError):
    status_code = 500
    public_message = "Internal server error."


class NotFoundError(AppError):
    status_code = 404
    public_message = "Not found."


class InvalidInputError(AppError):
    status_code = 400
    public_message = "Invalid input."


class UnauthorizedError(AppError):
    status_code = 401
    public_message = "Invalid username or password."


class InternalError(AppError):
    status_code = 500
    public_message = "Internal server error."
