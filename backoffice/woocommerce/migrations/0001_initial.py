# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('products', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='WooCommerceSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_url', models.CharField(max_length=500)),
                ('consumer_key', models.CharField(max_length=255)),
                ('consumer_secret', models.CharField(max_length=255)),
                ('use_query_auth', models.BooleanField(default=False, help_text='Send credentials as query parameters instead of Basic auth')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='woocommerce_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'woocommerce_settings',
                'verbose_name_plural': 'WooCommerce settings',
            },
        ),
        migrations.CreateModel(
            name='ChannelProductMap',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('channel', models.CharField(default='woocommerce', max_length=50)),
                ('enabled', models.BooleanField(default=True)),
                ('external_id', models.CharField(blank=True, max_length=100, null=True)),
                ('last_synced_at', models.DateTimeField(blank=True, null=True)),
                ('last_sync_status', models.CharField(blank=True, choices=[('success', 'Success'), ('error', 'Error')], max_length=20, null=True)),
                ('last_error', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='channel_maps', to='products.product')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='channel_product_maps', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'channel_product_map',
            },
        ),
        migrations.AddConstraint(
            model_name='channelproductmap',
            constraint=models.UniqueConstraint(fields=('user', 'product', 'channel'), name='unique_channel_product_per_user'),
        ),
        migrations.CreateModel(
            name='ChannelErrorLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('channel', models.CharField(default='woocommerce', max_length=50)),
                ('payload', models.JSONField(blank=True, default=dict)),
                ('response', models.JSONField(blank=True, default=dict)),
                ('error_message', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='channel_errors', to='products.product')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='channel_errors', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'channel_error_log',
                'ordering': ['-created_at'],
            },
        ),
    ]
