from django import forms
from django.core.exceptions import ValidationError

from .models import Brand, Category, Product


class BrandForm(forms.ModelForm):
    class Meta:
        model = Brand
        fields = ['name', 'logo', 'description', 'is_active']


class CategoryForm(forms.ModelForm):
    class Meta:
        model = Category
        fields = ['name', 'description', 'image', 'parent', 'is_active', 'meta_title', 'meta_description']

    def clean_parent(self):
        parent = self.cleaned_data.get('parent')
        if parent is None or self.instance.pk is None:
            return parent
        # Walk up from the new parent; meeting ourselves means a cycle
        node = parent
        while node is not None:
            if node.pk == self.instance.pk:
                raise ValidationError("A category cannot be nested under itself")
            node = node.parent
        return parent


class ProductForm(forms.ModelForm):
    """Product edits. Stock and the sold/rating aggregates are not editable here."""

    class Meta:
        model = Product
        fields = [
            'name', 'slug', 'sku', 'category', 'brand',
            'short_description', 'description',
            'price', 'original_price', 'discount',
            'image', 'images', 'features', 'specifications', 'tags',
            'warranty', 'weight', 'dimensions',
            'meta_title', 'meta_description',
            'is_active', 'is_featured', 'is_best_selling', 'is_new',
        ]

    def clean_sku(self):
        return (self.cleaned_data.get('sku') or '').strip() or None

    def clean_images(self):
        return _clean_list(self.cleaned_data.get('images'), 'images')

    def clean_features(self):
        return _clean_list(self.cleaned_data.get('features'), 'features')

    def clean_tags(self):
        return _clean_list(self.cleaned_data.get('tags'), 'tags')

    def clean_specifications(self):
        value = self.cleaned_data.get('specifications')
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise ValidationError("specifications must be an object")
        return value


class ProductCreateForm(ProductForm):
    """Initial stock can only be given when the product is created."""

    class Meta(ProductForm.Meta):
        fields = ProductForm.Meta.fields + ['stock']


def _clean_list(value, name):
    if value in (None, ''):
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{name} must be a list")
    return value
