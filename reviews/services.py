# reviews/services.py
"""
Rating aggregator.

Every review mutation locks the product row first, applies the change and
recomputes ``average_rating`` and ``review_count`` from the full set of
reviews in the same transaction. Concurrent edits on one product therefore
queue behind each other and never publish a stale average.
"""

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Count, Sum

from catalog.models import Product
from catalog.services import update_rating_aggregate
from core.api import is_admin
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from core.money import ZERO, to_money

from .models import Review

logger = logging.getLogger(__name__)

MAX_REVIEW_IMAGES = 5


def clean_rating(value):
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
        raise ValidationError('Rating must be an integer between 1 and 5')
    return value


def clean_images(value):
    if value in (None, ''):
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError('images must be a list of URLs')
    return value[:MAX_REVIEW_IMAGES]


def _lock_product(product_id):
    product = Product.objects.select_for_update().filter(pk=product_id).first()
    if product is None:
        raise NotFoundError('Product not found', code='ProductNotFound')
    return product


def _check_owner(review, user):
    if review.user_id != user.pk and not is_admin(user):
        raise AuthorizationError('Access denied')


def _has_purchased(user, product):
    return product.order_items.filter(order__user=user, order__status='delivered').exists()


def mean_rating(rating_sum, count):
    if not count:
        return ZERO
    return to_money(Decimal(rating_sum) / Decimal(count))


def recompute_product_rating(product_id):
    """
    Rewrite the product's rating aggregate from its current reviews.

    Must run inside the transaction that holds the product row lock.
    """
    stats = Review.objects.filter(product_id=product_id).aggregate(total=Sum('rating'), count=Count('id'))
    count = stats['count'] or 0
    average = mean_rating(stats['total'] or 0, count)
    update_rating_aggregate(product_id, average, count)
    logger.info(f"Product {product_id} rating recomputed: {average} over {count} review(s)")
    return average, count


def create_review(user, product_id, rating, comment='', title='', images=None):
    rating = clean_rating(rating)
    images = clean_images(images)

    with transaction.atomic():
        product = _lock_product(product_id)
        if not product.is_active:
            raise NotFoundError('Product not found', code='ProductNotFound')

        if Review.objects.filter(user=user, product=product).exists():
            logger.warning(f"Duplicate review refused: user {user.pk} on product {product.pk}")
            raise ConflictError('You have already reviewed this product', code='DuplicateReview')

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    product              = product,
                    user                 = user,
                    rating               = rating,
                    title                = str(title or '').strip(),
                    comment              = str(comment or '').strip(),
                    images               = images,
                    is_verified_purchase = _has_purchased(user, product),
                )
        except IntegrityError:
            logger.warning(f"Duplicate review refused: user {user.pk} on product {product.pk}")
            raise ConflictError('You have already reviewed this product', code='DuplicateReview')

        recompute_product_rating(product.pk)

    return review


def update_review(review, user, rating=None, comment=None, title=None, images=None):
    _check_owner(review, user)
    if rating is not None:
        rating = clean_rating(rating)
    if images is not None:
        images = clean_images(images)

    with transaction.atomic():
        _lock_product(review.product_id)
        review = Review.objects.select_for_update().get(pk=review.pk)
        rating_changed = rating is not None and rating != review.rating

        if rating is not None:
            review.rating = rating
        if comment is not None:
            review.comment = str(comment).strip()
        if title is not None:
            review.title = str(title).strip()
        if images is not None:
            review.images = images
        review.save()

        if rating_changed:
            recompute_product_rating(review.product_id)

    return review


def delete_review(review, user):
    _check_owner(review, user)

    with transaction.atomic():
        _lock_product(review.product_id)
        product_id = review.product_id
        Review.objects.filter(pk=review.pk).delete()
        recompute_product_rating(product_id)

    logger.info(f"Review {review.pk} deleted by user {user.pk}")
