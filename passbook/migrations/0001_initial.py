# Generated migration for PassbookEntry model
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('customers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PassbookEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('date', models.DateField(db_index=True)),
                ('daily_payment', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('amount', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('chitti_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('chit_lifting_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('chit_lifting', models.CharField(choices=[('YES', 'Yes'), ('NO', 'No')], default='NO', max_length=3)),
                ('payment_method', models.CharField(max_length=20)),
                ('payment_frequency', models.CharField(choices=[('DAILY', 'Daily'), ('MONTHLY', 'Monthly')], default='DAILY', max_length=10)),
                ('type', models.CharField(choices=[('GENERATED', 'Generated'), ('MANUAL', 'Manual')], db_index=True, default='MANUAL', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer_scheme', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='passbook_entries', to='customers.customerscheme')),
            ],
            options={
                'verbose_name': 'Passbook Entry',
                'verbose_name_plural': 'Passbook Entries',
                'db_table': 'passbook_entries',
                'ordering': ['-date', '-created_at'],
                'constraints': [models.UniqueConstraint(condition=models.Q(('type', 'MANUAL')), fields=('customer_scheme', 'month'), name='unique_manual_entry_per_month')],
            },
        ),
    ]
