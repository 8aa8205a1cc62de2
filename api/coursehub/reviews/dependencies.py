from typing import Annotated

from fastapi import Depends

from coursehub.core.dependencies import ServiceSlot
from coursehub.reviews.service import ReviewAggregator


get_review_aggregator = ServiceSlot[ReviewAggregator]("ReviewAggregator")
set_review_aggregator_getter = get_review_aggregator.set_getter

ReviewAggregatorDep = Annotated[ReviewAggregator, Depends(get_review_aggregator)]
