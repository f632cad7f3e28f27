# Generated migration for the emergencies app
# Emergency.accepted_proposal is added after Proposal exists

import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import core.validators


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Emergency',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='Updated at')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(validators=[django.core.validators.MaxLengthValidator(5000)])),
                ('address', models.CharField(max_length=255)),
                ('arrondissement', models.PositiveSmallIntegerField(db_index=True, validators=[core.validators.validate_arrondissement])),
                ('trade', models.CharField(choices=[('Plomberie', 'Plomberie'), ('Électricité', 'Électricité'), ('Serrurerie', 'Serrurerie'), ('Couverture', 'Couverture'), ('Chauffage', 'Chauffage'), ('Menuiserie', 'Menuiserie'), ('Maçonnerie', 'Maçonnerie'), ('Peinture', 'Peinture'), ('Vitrerie', 'Vitrerie'), ('Climatisation', 'Climatisation')], db_index=True, max_length=50)),
                ('max_budget', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('urgency_level', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('critical', 'Critical')], db_index=True, default='medium', max_length=10)),
                ('status', models.CharField(choices=[('open', 'Open'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('closed', 'Closed')], db_index=True, default='open', max_length=20)),
                ('photos', models.JSONField(blank=True, default=list)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='emergencies', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Emergency',
                'verbose_name_plural': 'Emergencies',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', 'trade', 'arrondissement'], name='emergency_status_trade_arr_idx')],
            },
        ),
        migrations.CreateModel(
            name='Proposal',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='Updated at')),
                ('artisan_name', models.CharField(max_length=200)),
                ('artisan_company', models.CharField(blank=True, max_length=200)),
                ('artisan_rating', models.DecimalField(decimal_places=2, max_digits=3)),
                ('price', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('description', models.TextField(validators=[django.core.validators.MaxLengthValidator(5000)])),
                ('estimated_duration', models.CharField(max_length=100)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('artisan', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='proposals', to=settings.AUTH_USER_MODEL)),
                ('emergency', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='proposals', to='emergencies.emergency')),
            ],
            options={
                'verbose_name': 'Proposal',
                'verbose_name_plural': 'Proposals',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddField(
            model_name='emergency',
            name='accepted_proposal',
            field=models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='emergencies.proposal'),
        ),
        migrations.AddConstraint(
            model_name='proposal',
            constraint=models.UniqueConstraint(fields=('emergency', 'artisan'), name='emergencies_proposal_unique_emergency_artisan'),
        ),
        migrations.AddConstraint(
            model_name='proposal',
            constraint=models.UniqueConstraint(condition=models.Q(('status', 'accepted')), fields=('emergency',), name='emergencies_proposal_single_accepted'),
        ),
    ]
