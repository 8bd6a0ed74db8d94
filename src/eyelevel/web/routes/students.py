"""Student registry endpoints."""

from fastapi import APIRouter, status

from eyelevel.web.schemas import StudentCreate, StudentListResponse
from eyelevel.web.services import get_student_registry

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("", response_model=StudentListResponse)
def list_students() -> StudentListResponse:
    """List registered students in insertion order."""
    students = get_student_registry().list()
    return StudentListResponse(students=students, count=len(students))


@router.post("", response_model=StudentListResponse, status_code=status.HTTP_201_CREATED)
def add_student(student_data: StudentCreate) -> StudentListResponse:
    """Add a student. Names are not deduplicated."""
    students = get_student_registry().add(student_data.name)
    return StudentListResponse(students=students, count=len(students))
