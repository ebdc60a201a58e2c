# Generated manually
import django.db.models.deletion
import django.db.models.expressions
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_number', models.CharField(blank=True, max_length=100, null=True)),
                ('sku', models.CharField(blank=True, max_length=100, null=True)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('status', models.CharField(choices=[('for sale', 'For Sale'), ('draft', 'Draft'), ('archived', 'Archived')], default='for sale', max_length=20)),
                ('quantity', models.IntegerField(default=0)),
                ('price_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('currency', models.CharField(default='SEK', max_length=3)),
                ('vat_rate', models.DecimalField(decimal_places=2, default=Decimal('25.00'), max_digits=5)),
                ('main_image', models.CharField(blank=True, max_length=500, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('categories', models.JSONField(blank=True, default=list)),
                ('brand', models.CharField(blank=True, max_length=255, null=True)),
                ('gtin', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'products',
                'ordering': [django.db.models.expressions.OrderBy(django.db.models.expressions.F('product_number'), nulls_last=True), 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='product',
            constraint=models.UniqueConstraint(fields=('user', 'product_number'), name='unique_product_number_per_user'),
        ),
        migrations.AddConstraint(
            model_name='product',
            constraint=models.UniqueConstraint(fields=('user', 'sku'), name='unique_product_sku_per_user'),
        ),
        migrations.AddIndex(
            model_name='product',
            index=models.Index(fields=['user', 'status'], name='products_user_status_idx'),
        ),
    ]
