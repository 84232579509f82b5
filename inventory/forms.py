"""Forms for product management."""
from django import forms
from .models import Product


class ProductForm(forms.ModelForm):
    class Meta:
        model = Product
        fields = ["sku", "name", "unit_price", "active"]

    def __init__(self, *args, tenant, **kwargs):
        super().__init__(*args, **kwargs)
        self.tenant = tenant

    def clean_sku(self):
        sku = self.cleaned_data["sku"].strip().upper()
        clash = Product.objects.filter(tenant=self.tenant, sku=sku)
        if self.instance.pk:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise forms.ValidationError("A product with this SKU already exists.")
        return sku
