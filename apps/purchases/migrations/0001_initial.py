# Generated manually for purchases app

import uuid
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('stores', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Purchase',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField()),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Partial', 'Partial'), ('Paid', 'Paid'), ('Overdue', 'Overdue')], default='Pending', max_length=10)),
                ('total_grams', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('base_fees', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=16)),
                ('total_discount', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=16)),
                ('total_fees', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=16)),
                ('due_date', models.DateField()),
                ('grams_paid', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('fees_paid', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to='stores.store')),
            ],
            options={
                'db_table': 'purchases',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['date'], name='purchases_date_idx'),
                    models.Index(fields=['store', 'date'], name='purchases_store_date_idx'),
                    models.Index(fields=['status'], name='purchases_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PurchaseSupplierReceipt',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('supplier_code', models.CharField(max_length=32)),
                ('grams_18k', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14, validators=[MinValueValidator(Decimal('0'))])),
                ('grams_21k', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14, validators=[MinValueValidator(Decimal('0'))])),
                ('total_grams_21k', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('purchase', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='receipts', to='purchases.purchase')),
            ],
            options={
                'db_table': 'purchase_supplier_receipts',
                'ordering': ['supplier_code'],
                'constraints': [
                    models.UniqueConstraint(fields=('purchase', 'supplier_code'), name='unique_receipt_per_purchase_supplier'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField()),
                ('date', models.DateField()),
                ('grams_paid', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14, validators=[MinValueValidator(Decimal('0'))])),
                ('fees_paid', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=16, validators=[MinValueValidator(Decimal('0'))])),
                ('karat_type', models.CharField(choices=[('18', '18k'), ('21', '21k')], default='21', max_length=2)),
                ('grams_paid_21k', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('purchase', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payment_history', to='purchases.purchase')),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['position'],
                'indexes': [models.Index(fields=['purchase', 'position'], name='payments_purchase_pos_idx')],
            },
        ),
    ]
