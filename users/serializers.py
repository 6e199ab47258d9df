# users/serializers.py


def serialize_user(user, private=False):
    data = {
        'id':         user.id,
        'first_name': user.first_name,
        'last_name':  user.last_name,
        'avatar':     user.avatar,
    }
    if private:
        data.update({
            'email':            user.email,
            'phone':            user.phone,
            'role':             user.role,
            'is_active':        user.is_active,
            'email_verified':   user.email_verified,
            'last_login':       user.last_login,
            'shipping_address': user.shipping_address,
            'billing_address':  user.billing_address,
            'created_at':       user.created_at,
        })
    return data
