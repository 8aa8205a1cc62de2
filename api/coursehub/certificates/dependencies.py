from typing import Annotated

from fastapi import Depends

from coursehub.certificates.service import CertificateEvaluator
from coursehub.core.dependencies import ServiceSlot


get_certificate_evaluator = ServiceSlot[CertificateEvaluator]("CertificateEvaluator")
set_certificate_evaluator_getter = get_certificate_evaluator.set_getter

CertificateEvaluatorDep = Annotated[
    CertificateEvaluator, Depends(get_certificate_evaluator)
]
