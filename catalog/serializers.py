# catalog/serializers.py


def serialize_brand(brand):
    return {
        'id':          brand.id,
        'name':        brand.name,
        'slug':        brand.slug,
        'logo':        brand.logo,
        'description': brand.description,
        'is_active':   brand.is_active,
    }


def serialize_category(category, children=None):
    data = {
        'id':          category.id,
        'name':        category.name,
        'slug':        category.slug,
        'description': category.description,
        'image':       category.image,
        'parent_id':   category.parent_id,
        'is_active':   category.is_active,
    }
    if children is not None:
        data['children'] = [serialize_category(child) for child in children]
    return data


def serialize_product_summary(product):
    """Compact form used inside carts, orders and comparisons."""
    return {
        'id':             product.id,
        'name':           product.name,
        'slug':           product.slug,
        'price':          product.price,
        'original_price': product.original_price,
        'image':          product.image,
        'stock':          product.stock,
        'is_active':      product.is_active,
    }


def serialize_product(product, detail=False):
    data = {
        'id':                product.id,
        'name':              product.name,
        'slug':              product.slug,
        'sku':               product.sku,
        'short_description': product.short_description,
        'price':             product.price,
        'original_price':    product.original_price,
        'discount':          product.discount,
        'image':             product.image,
        'stock':             product.stock,
        'in_stock':          product.in_stock,
        'sold_count':        product.sold_count,
        'average_rating':    product.average_rating,
        'review_count':      product.review_count,
        'is_active':         product.is_active,
        'is_featured':       product.is_featured,
        'is_best_selling':   product.is_best_selling,
        'is_new':            product.is_new,
        'is_todays_deal':    product.is_todays_deal,
        'brand':             {'id': product.brand_id, 'name': product.brand.name},
        'category':          {'id': product.category_id, 'name': product.category.name},
        'created_at':        product.created_at,
    }
    if detail:
        data.update({
            'description':      product.description,
            'images':           product.images,
            'features':         product.features,
            'specifications':   product.specifications,
            'tags':             product.tags,
            'warranty':         product.warranty,
            'weight':           product.weight,
            'dimensions':       product.dimensions,
            'meta_title':       product.meta_title,
            'meta_description': product.meta_description,
            'updated_at':       product.updated_at,
        })
    return data
