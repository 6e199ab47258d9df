from django.db.models import Count, Q

from catalog.models import Product
from core.api import (
    api_view, json_response, read_json, get_or_not_found, paginate,
    resolve_identity, login_required_json,
)

from .models import Review
from .serializers import serialize_review
from .services import create_review, update_review, delete_review

REVIEW_SORTS = {
    'latest':  ['-created_at'],
    'oldest':  ['created_at'],
    'highest': ['-rating', '-created_at'],
    'lowest':  ['rating', '-created_at'],
}


def rating_breakdown(product):
    """Number of reviews per star, 5 down to 1."""
    stats = Review.objects.filter(product=product).aggregate(
        five_star=Count('id', filter=Q(rating=5)),
        four_star=Count('id', filter=Q(rating=4)),
        three_star=Count('id', filter=Q(rating=3)),
        two_star=Count('id', filter=Q(rating=2)),
        one_star=Count('id', filter=Q(rating=1)),
    )
    return {
        '5': stats['five_star'],
        '4': stats['four_star'],
        '3': stats['three_star'],
        '2': stats['two_star'],
        '1': stats['one_star'],
    }


@api_view(['GET', 'POST'])
def product_reviews(request, product_id):
    """List a product's reviews, or write one"""
    product = get_or_not_found(Product.objects.filter(is_active=True), 'Product not found', pk=product_id)

    if request.method == 'POST':
        resolve_identity(request)
        data = read_json(request)
        review = create_review(
            user       = request.user,
            product_id = product.pk,
            rating     = data.get('rating'),
            comment    = data.get('comment', ''),
            title      = data.get('title', ''),
            images     = data.get('images'),
        )
        review = Review.objects.select_related('user').get(pk=review.pk)
        return json_response({
            'message': 'Review created successfully',
            'review':  serialize_review(review),
        }, status=201)

    reviews = Review.objects.filter(product=product).select_related('user')

    # Filter by rating
    rating_filter = request.GET.get('rating')
    if rating_filter and rating_filter.isdigit():
        reviews = reviews.filter(rating=int(rating_filter))

    sort_by = request.GET.get('sort', 'latest')
    reviews = reviews.order_by(*REVIEW_SORTS.get(sort_by, REVIEW_SORTS['latest']))

    page, meta = paginate(request, reviews, default_limit=10)
    return json_response({
        'reviews':        [serialize_review(r) for r in page],
        **meta,
        'total_reviews':  meta['count'],
        'average_rating': product.average_rating,
        'review_count':   product.review_count,
        'rating_stats':   rating_breakdown(product),
    })


@api_view(['PUT', 'DELETE'])
@login_required_json
def review_detail(request, review_id):
    review = get_or_not_found(Review.objects.all(), 'Review not found', pk=review_id)

    if request.method == 'DELETE':
        delete_review(review, request.user)
        return json_response({'message': 'Review deleted successfully'})

    data = read_json(request)
    review = update_review(
        review,
        request.user,
        rating  = data.get('rating'),
        comment = data.get('comment'),
        title   = data.get('title'),
        images  = data.get('images'),
    )
    review = Review.objects.select_related('user').get(pk=review.pk)
    return json_response({
        'message': 'Review updated successfully',
        'review':  serialize_review(review),
    })


@api_view(['GET'])
@login_required_json
def my_reviews(request):
    reviews = Review.objects.filter(user=request.user).select_related('user').order_by('-created_at')
    page, meta = paginate(request, reviews, default_limit=10)
    return json_response({'reviews': [serialize_review(r) for r in page], **meta})
