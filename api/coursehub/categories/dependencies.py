from typing import Annotated

from fastapi import Depends

from coursehub.categories.service import CategoryService
from coursehub.core.dependencies import ServiceSlot


get_category_service = ServiceSlot[CategoryService]("CategoryService")
set_category_service_getter = get_category_service.set_getter

CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
