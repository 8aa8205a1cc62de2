"""FastAPI dependencies for admin endpoints."""

from typing import Annotated

from fastapi import Depends

from coursehub.admin.service import AdminService
from coursehub.core.dependencies import ServiceSlot


get_admin_service = ServiceSlot[AdminService]("AdminService")
set_admin_service_getter = get_admin_service.set_getter

AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
