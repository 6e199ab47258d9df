# wishlist/views.py

from django.db import IntegrityError, transaction

from cart.models import CartItem
from cart.views import get_or_create_cart
from catalog.models import Product
from catalog.serializers import serialize_product
from core.api import api_view, json_response, get_or_not_found, login_required_json
from core.exceptions import ConflictError, NotFoundError

from .models import Wishlist, WishlistItem


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

def get_or_create_wishlist(user):
    """Return the user's wishlist, creating it if it doesn't exist."""
    wishlist, _ = Wishlist.objects.get_or_create(user=user)
    return wishlist


def serialize_wishlist_item(item):
    return {
        'id':       item.id,
        'product':  serialize_product(item.product),
        'added_at': item.added_at,
    }


# ─────────────────────────────────────────────
# WISHLIST
# ─────────────────────────────────────────────

@api_view(['GET', 'DELETE'])
@login_required_json
def wishlist_view(request):
    wishlist = get_or_create_wishlist(request.user)

    if request.method == 'DELETE':
        wishlist.items.all().delete()
        return json_response({'message': 'Wishlist cleared'})

    items = wishlist.items.select_related('product', 'product__brand', 'product__category')
    return json_response({
        'items': [serialize_wishlist_item(item) for item in items],
        'count': len(items),
    })


@api_view(['POST', 'DELETE'])
@login_required_json
def wishlist_item(request, product_id):
    wishlist = get_or_create_wishlist(request.user)

    if request.method == 'DELETE':
        deleted, _ = wishlist.items.filter(product_id=product_id).delete()
        if not deleted:
            raise NotFoundError('Product not in wishlist')
        return json_response({'message': 'Product removed from wishlist'})

    product = get_or_not_found(Product.objects.filter(is_active=True), 'Product not found', pk=product_id)
    try:
        with transaction.atomic():
            item = WishlistItem.objects.create(wishlist=wishlist, product=product)
    except IntegrityError:
        raise ConflictError('Product already in wishlist', code='DuplicateWishlistItem')

    return json_response({
        'message': 'Product added to wishlist',
        'item':    serialize_wishlist_item(item),
    }, status=201)


@api_view(['POST'])
@login_required_json
def move_to_cart(request, product_id):
    """Move one wishlist product into the cart (quantity 1)."""
    wishlist = get_or_create_wishlist(request.user)
    item = get_or_not_found(wishlist.items.select_related('product'), 'Product not in wishlist', product_id=product_id)
    product = item.product
    if not product.is_active:
        raise NotFoundError('Product not found')

    cart = get_or_create_cart(request.user)
    with transaction.atomic():
        cart_item = cart.items.select_for_update().filter(product=product).first()
        quantity = (cart_item.quantity if cart_item else 0) + 1
        if product.stock < quantity:
            raise ConflictError(f"Insufficient stock for {product.name}", code='InsufficientStock')
        if cart_item:
            cart_item.quantity = quantity
            cart_item.save(update_fields=['quantity', 'updated_at'])
        else:
            CartItem.objects.create(cart=cart, product=product, quantity=1)
        item.delete()

    return json_response({'message': f'"{product.name}" moved to cart'})
