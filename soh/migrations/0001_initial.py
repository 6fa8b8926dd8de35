import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


STATUS_CHOICES = [
    ('Processing', 'Processing'),
    ('Storing', 'Storing'),
    ('Completed', 'Completed'),
    ('ValidationError', 'Validation Error'),
    ('SystemError', 'System Error'),
    ('Pending Deletion', 'Pending Deletion'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SOHDataReference',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('filename', models.CharField(max_length=255)),
                ('original_filename', models.CharField(max_length=255)),
                ('uploaded_by', models.EmailField(help_text='Email of the uploading user.', max_length=255)),
                ('uploaded_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('content_type', models.CharField(blank=True, default='', max_length=255)),
                ('size', models.BigIntegerField(default=0)),
                ('row_count', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='Processing', max_length=32)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('is_locked', models.BooleanField(default=False)),
                ('delete_approval_token', models.CharField(blank=True, db_index=True, max_length=128, null=True)),
                ('delete_approval_token_expires', models.DateTimeField(blank=True, null=True)),
                ('status_before_deletion', models.CharField(blank=True, choices=STATUS_CHOICES, max_length=32, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='soh_references', to='projects.stoproject')),
            ],
            options={
                'verbose_name': 'SOH Data Reference',
                'verbose_name_plural': 'SOH Data References',
                'ordering': ['-uploaded_at'],
            },
        ),
        migrations.CreateModel(
            name='StockItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField()),
                ('qty_on_hand', models.DecimalField(decimal_places=4, max_digits=18)),
                ('location', models.CharField(blank=True, default='', max_length=255)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_items', to='projects.stoproject')),
                ('soh_data_reference', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_items', to='soh.sohdatareference')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
    ]
