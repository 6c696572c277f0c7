import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Guide',
            fields=[
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('username', models.CharField(max_length=150, unique=True)),
                ('guide_name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='guide_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['guide_name'],
            },
        ),
        migrations.CreateModel(
            name='Student',
            fields=[
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('student_id', models.CharField(max_length=20)),
                ('student_name', models.CharField(blank=True, default='', max_length=255)),
                ('is_onboarded', models.BooleanField(default=False)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('semester', models.PositiveSmallIntegerField(choices=[(5, 'Semester 5'), (7, 'Semester 7')])),
                ('year', models.CharField(blank=True, help_text='Academic year, e.g. 2025-2026', max_length=9)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='student_profiles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['student_id'],
                'unique_together': {('student_id', 'semester', 'year')},
            },
        ),
    ]
