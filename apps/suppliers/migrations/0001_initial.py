# Generated manually for suppliers app

import uuid
from decimal import Decimal
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=120)),
                ('code', models.CharField(max_length=32, unique=True)),
                ('is_active', models.BooleanField(default=True)),
                ('karat_18_active', models.BooleanField(default=False)),
                ('karat_21_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'suppliers',
                'ordering': ['code'],
                'indexes': [models.Index(fields=['is_active'], name='suppliers_is_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='DiscountTier',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('karat_type', models.CharField(choices=[('18', '18k'), ('21', '21k')], max_length=2)),
                ('name', models.CharField(max_length=60)),
                ('threshold', models.PositiveIntegerField()),
                ('discount_percentage', models.DecimalField(decimal_places=2, max_digits=5, validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))])),
                ('is_protected', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discount_tiers', to='suppliers.supplier')),
            ],
            options={
                'db_table': 'discount_tiers',
                'ordering': ['supplier', 'karat_type', 'threshold'],
                'constraints': [
                    models.UniqueConstraint(fields=('supplier', 'karat_type', 'name'), name='unique_tier_name_per_supplier_karat'),
                    models.UniqueConstraint(fields=('supplier', 'karat_type', 'threshold'), name='unique_tier_threshold_per_supplier_karat'),
                ],
            },
        ),
    ]
