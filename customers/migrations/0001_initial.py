# Generated migration for Customer and CustomerScheme models
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('schemes', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('mobile', models.CharField(db_index=True, max_length=20)),
                ('address', models.TextField()),
                ('photo', models.CharField(blank=True, max_length=500, null=True)),
                ('documents', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('COMPLETED', 'Completed'), ('DEFAULTED', 'Defaulted')], db_index=True, default='ACTIVE', max_length=20)),
                ('last_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'db_table': 'customers',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='CustomerScheme',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('enrolled_at', models.DateTimeField(auto_now_add=True)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('COMPLETED', 'Completed'), ('DEFAULTED', 'Defaulted')], db_index=True, default='ACTIVE', max_length=20)),
                ('amount_per_day', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(1)])),
                ('duration', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('duration_type', models.CharField(choices=[('DAYS', 'Days'), ('MONTHS', 'Months')], default='MONTHS', max_length=10)),
                ('start_date', models.DateField()),
                ('last_date', models.DateField(blank=True, null=True)),
                ('balance', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='customers.customer')),
                ('scheme', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='schemes.chitscheme')),
            ],
            options={
                'verbose_name': 'Customer Scheme',
                'verbose_name_plural': 'Customer Schemes',
                'db_table': 'customer_schemes',
                'ordering': ['-enrolled_at'],
            },
        ),
        migrations.AddField(
            model_name='customer',
            name='schemes',
            field=models.ManyToManyField(related_name='customers', through='customers.CustomerScheme', to='schemes.chitscheme'),
        ),
        migrations.AddConstraint(
            model_name='customerscheme',
            constraint=models.UniqueConstraint(fields=('customer', 'scheme'), name='unique_customer_scheme'),
        ),
    ]
