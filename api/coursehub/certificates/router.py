"""Certificate API endpoint."""

from uuid import UUID

from fastapi import APIRouter

from coursehub.auth.dependencies import CurrentUser
from coursehub.certificates.dependencies import CertificateEvaluatorDep
from coursehub.certificates.schemas import CertificateResponse


router = APIRouter(prefix="/v1/courses", tags=["certificates"])


@router.get(
    "/{course_id}/certificate",
    response_model=CertificateResponse,
    summary="Get course certificate",
)
async def get_certificate(
    course_id: UUID,
    evaluator: CertificateEvaluatorDep,
    user: CurrentUser,
) -> CertificateResponse:
    """Certificate for the current user, available at 100% progress."""
    certificate = await evaluator.issue(user.id, course_id)
    return CertificateResponse.model_validate(certificate)
