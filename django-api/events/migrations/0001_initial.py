import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('name', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField()),
                ('last_login_at', models.DateTimeField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('date', models.DateField()),
                ('venue_name', models.CharField(max_length=255)),
                ('venue_address', models.CharField(max_length=500)),
                ('description', models.TextField(blank=True, null=True)),
                ('hashtags', models.CharField(blank=True, max_length=500, null=True)),
                ('guest_list_deadline', models.DateField()),
                ('promo_materials_deadline', models.DateField()),
                ('payment_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('payment_per_dj', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('payment_currency', models.CharField(max_length=10)),
                ('payment_due_date', models.DateField()),
                ('guest_limit_per_dj', models.PositiveIntegerField(blank=True, null=True)),
                ('phase', models.CharField(choices=[('draft', 'Draft'), ('planning', 'Planning'), ('finalized', 'Finalized'), ('day_of', 'Day Of'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('phase_entered_at', models.DateTimeField()),
                ('phase_reason', models.TextField(blank=True, null=True)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('finalized_at', models.DateTimeField(blank=True, null=True)),
                ('day_of_started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField()),
                ('updated_at', models.DateTimeField()),
                ('organizer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='events', to='events.user')),
                ('phase_entered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='events.user')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['organizer', '-created_at'], name='event_organizer_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='Timeslot',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField()),
                ('dj_name', models.CharField(max_length=255)),
                ('dj_instagram', models.CharField(blank=True, default='', max_length=255)),
                ('submission_token', models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ('submission_ref', models.UUIDField(blank=True, null=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='timeslots', to='events.event')),
            ],
            options={
                'ordering': ['start_time'],
                'indexes': [models.Index(fields=['event', 'start_time'], name='timeslot_event_start_idx')],
            },
        ),
        migrations.CreateModel(
            name='Submission',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('unique_link', models.CharField(max_length=64)),
                ('promo_description', models.TextField(blank=True, default='')),
                ('promo_files', models.JSONField(default=list)),
                ('guest_list', models.JSONField(default=list)),
                ('payment_account_holder', models.CharField(max_length=255)),
                ('payment_bank_name', models.CharField(max_length=255)),
                ('payment_account_number', models.TextField()),
                ('payment_resident_number', models.TextField()),
                ('payment_prefer_direct_contact', models.BooleanField(default=False)),
                ('submitted_at', models.DateTimeField()),
                ('last_updated_at', models.DateTimeField()),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='submissions', to='events.event')),
                ('timeslot', models.OneToOneField(on_delete=django.db.models.deletion.RESTRICT, related_name='submission_record', to='events.timeslot')),
            ],
            options={
                'indexes': [models.Index(fields=['event'], name='submission_event_idx')],
            },
        ),
    ]
