"""
Rating aggregates for businesses.

Every review write goes through this module so the review row and the
business's average_rating/review_count change in one transaction; a reader
never sees a review whose rating is missing from the aggregate.
"""
from typing import Optional

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.transactions import in_transaction

from bizboost.models.business import Business
from bizboost.models.review import Review


async def refresh_business_rating(business_id: int, conn: BaseDBAsyncClient) -> tuple[float, int]:
    """
    Recompute a business's aggregates from its reviews on the given connection.
    Must be called inside the transaction that changed the reviews.
    """
    ratings = await Review.filter(business_id=business_id).using_db(conn).values_list("rating", flat=True)
    count = len(ratings)
    average = round(sum(ratings) / count, 2) if count else 0.0
    await Business.filter(id=business_id).using_db(conn).update(average_rating=average, review_count=count)
    return average, count


async def add_review(business_id: int, user_id: str, rating: int, title: str, review_text: str) -> Review:
    async with in_transaction() as conn:
        review = await Review.create(
            business_id=business_id,
            user_id=user_id,
            rating=rating,
            title=title,
            review_text=review_text,
            using_db=conn,
        )
        await refresh_business_rating(business_id, conn)
    return review


async def update_review(review: Review, rating: int, title: str, review_text: str) -> Review:
    async with in_transaction() as conn:
        review.rating = rating
        review.title = title
        review.review_text = review_text
        await review.save(using_db=conn)
        await refresh_business_rating(review.business_id, conn)
    return review


async def remove_review(review: Review) -> Optional[int]:
    business_id = review.business_id
    async with in_transaction() as conn:
        await review.delete(using_db=conn)
        await refresh_business_rating(business_id, conn)
    return business_id
