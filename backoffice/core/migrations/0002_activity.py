# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
        ('contacts', '0001_initial'),
        ('invoices', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Activity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('activity_type', models.CharField(choices=[('CONTACT_CREATED', 'Contact Created'), ('CONTACT_UPDATED', 'Contact Updated'), ('CONTACT_DELETED', 'Contact Deleted'), ('INVOICE_CREATED', 'Invoice Created'), ('INVOICE_UPDATED', 'Invoice Updated'), ('INVOICE_STATUS_CHANGED', 'Invoice Status Changed'), ('INVOICE_DELETED', 'Invoice Deleted'), ('ESTIMATE_CREATED', 'Estimate Created'), ('ESTIMATE_UPDATED', 'Estimate Updated'), ('ESTIMATE_STATUS_CHANGED', 'Estimate Status Changed'), ('PRODUCT_CREATED', 'Product Created'), ('PRODUCT_UPDATED', 'Product Updated'), ('PRODUCTS_EXPORTED', 'Products Exported')], max_length=50)),
                ('description', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('contact', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activities', to='contacts.contact')),
                ('invoice', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activities', to='invoices.invoice')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='activities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'activities',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.AddIndex(
            model_name='activity',
            index=models.Index(fields=['user', '-created_at'], name='activities_user_created_idx'),
        ),
        migrations.AddIndex(
            model_name='activity',
            index=models.Index(fields=['activity_type'], name='activities_type_idx'),
        ),
    ]
