"""Permission model: permission strings and the static role hierarchy."""

from enum import Enum


class Permission(str, Enum):
    """Every permission string the platform knows."""

    # User
    CREATE_USER = "createUser"
    GET_USERS = "getUsers"
    UPDATE_USER = "updateUser"
    DELETE_USER = "deleteUser"
    GET_USER_EMAIL = "getUserEmail"
    GET_USER_PERMISSIONS = "getUserPermissions"
    GET_USER_CATEGORY_RATING_MARKS = "getUserCategoryRatingMarks"
    GET_USER_QUESTION_RATING_MARKS = "getUserQuestionRatingMarks"

    # Category
    CREATE_CATEGORY = "createCategory"
    UPDATE_CATEGORY = "updateCategory"
    DELETE_CATEGORY = "deleteCategory"
    APPROVE_CATEGORY = "approveCategory"
    RATE_CATEGORY = "rateCategory"

    # Question
    CREATE_QUESTION = "createQuestion"
    UPDATE_QUESTION = "updateQuestion"
    DELETE_QUESTION = "deleteQuestion"
    APPROVE_QUESTION = "approveQuestion"
    RATE_QUESTION = "rateQuestion"
    GET_QUESTION_CHOICES = "getQuestionChoices"

    # Exam
    CREATE_EXAM = "createExam"
    GET_EXAM = "getExam"
    GET_EXAM_QUESTION = "getExamQuestion"
    CREATE_EXAM_QUESTION_ANSWER = "createExamQuestionAnswer"
    DELETE_EXAM_QUESTION_ANSWER = "deleteExamQuestionAnswer"
    CREATE_EXAM_COMPLETION = "createExamCompletion"
    DELETE_EXAM = "deleteExam"

    # Roles
    REGULAR = "regular"
    ROOT = "root"
    ALL = "*"


PermissionHierarchy = dict[str, list[str]]

DEFAULT_PERMISSION_HIERARCHY: PermissionHierarchy = {
    Permission.REGULAR.value: [
        Permission.CREATE_CATEGORY.value,
        Permission.CREATE_QUESTION.value,
        Permission.CREATE_EXAM.value,
        Permission.RATE_CATEGORY.value,
        Permission.RATE_QUESTION.value,
    ],
    Permission.ROOT.value: [Permission.ALL.value],
}

DEFAULT_USER_PERMISSIONS: list[str] = [Permission.REGULAR.value]


def all_permissions() -> list[str]:
    return [permission.value for permission in Permission]


def expand_permissions(permissions: list[str], hierarchy: PermissionHierarchy) -> set[str]:
    """Resolve permissions through the hierarchy, recursively and cycle-safe."""
    resolved: set[str] = set()
    pending = list(permissions)
    while pending:
        permission = pending.pop()
        if permission in resolved:
            continue
        resolved.add(permission)
        pending.extend(hierarchy.get(permission, []))
    return resolved
