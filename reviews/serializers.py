def serialize_review(review):
    return {
        'id':                   review.id,
        'product_id':           review.product_id,
        'user': {
            'id':         review.user_id,
            'first_name': review.user.first_name,
            'last_name':  review.user.last_name,
            'avatar':     review.user.avatar,
        },
        'rating':               review.rating,
        'title':                review.title,
        'comment':              review.comment,
        'images':               review.images,
        'is_verified_purchase': review.is_verified_purchase,
        'created_at':           review.created_at,
        'updated_at':           review.updated_at,
    }
