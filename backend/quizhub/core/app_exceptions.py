"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException

from quizhub.core.errors import status_for_error


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class DomainError(AppError):
    """Error raised by services; the HTTP status comes from the error kind table."""

    def __init__(self, message: str, details: dict[str, Any] | list[Any] | None = None):
        code = type(self).__name__
        super().__init__(status_code=status_for_error(code), code=code, message=message, details=details)


# Bad request


class ValidatorError(DomainError):
    """Input failed validation."""


class ExamQuestionAnswerTypeError(DomainError):
    def __init__(self, question_type: str):
        super().__init__(f'Answer does not match question type "{question_type}"', {"type": question_type})


# Authentication / authorization


class AuthorizationRequiredError(DomainError):
    def __init__(self, message: str = "Authorization is required"):
        super().__init__(message)


class AuthorizationFailedError(DomainError):
    def __init__(self, permission: str):
        super().__init__(f'Authorization failed: "{permission}" permission required', {"permission": permission})
        self.permission = permission


class UserWrongCredentialsError(DomainError):
    def __init__(self):
        super().__init__("Wrong credentials")


# Not found


class _EntityNotFoundError(DomainError):
    entity = "Entity"

    def __init__(self, entity_id: str):
        super().__init__(f'{self.entity} "{entity_id}" not found', {"id": str(entity_id)})
        self.entity_id = entity_id


class CategoryNotFoundError(_EntityNotFoundError):
    entity = "Category"


class QuestionNotFoundError(_EntityNotFoundError):
    entity = "Question"


class ExamNotFoundError(_EntityNotFoundError):
    entity = "Exam"


class UserNotFoundError(_EntityNotFoundError):
    entity = "User"


class UserEmailNotFoundError(DomainError):
    def __init__(self, email: str):
        super().__init__(f'User with email "{email}" not found', {"email": email})


class ExamQuestionNumberNotFoundError(DomainError):
    def __init__(self, question_number: int):
        super().__init__(f"Exam question number {question_number} not found", {"number": question_number})
        self.question_number = question_number


# Conflict


class CategoryNameTakenError(DomainError):
    def __init__(self, name: str):
        super().__init__(f'Category name "{name}" is already taken', {"name": name})


class QuestionTitleTakenError(DomainError):
    def __init__(self, title: str):
        super().__init__(f'Question title "{title}" is already taken', {"title": title})


class UserEmailTakenError(DomainError):
    def __init__(self, email: str):
        super().__init__(f'Email "{email}" is already taken', {"email": email})


class CategoryNotApprovedError(DomainError):
    def __init__(self, category_id: str):
        super().__init__(f'Category "{category_id}" is not approved', {"id": category_id})


class CategoryWithoutApprovedQuestionsError(DomainError):
    def __init__(self, category_id: str):
        super().__init__(f'Category "{category_id}" has no approved questions', {"id": category_id})


class ExamTakenError(DomainError):
    def __init__(self, exam_id: str):
        super().__init__(f'Exam "{exam_id}" is already in progress for this category', {"id": exam_id})
        self.exam_id = exam_id


class ExamCompletedError(DomainError):
    def __init__(self, exam_id: str):
        super().__init__(f'Exam "{exam_id}" is already completed', {"id": exam_id})


class CategoryRatedAlreadyError(DomainError):
    def __init__(self, category_id: str):
        super().__init__(f'Category "{category_id}" is already rated', {"id": category_id})


class QuestionRatedAlreadyError(DomainError):
    def __init__(self, question_id: str):
        super().__init__(f'Question "{question_id}" is already rated', {"id": question_id})
