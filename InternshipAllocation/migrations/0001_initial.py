import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('UserDataManagement', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GuideAllocation',
            fields=[
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('allocation_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('range', models.CharField(max_length=40)),
                ('semester', models.PositiveSmallIntegerField(choices=[(5, 'Semester 5'), (7, 'Semester 7')])),
                ('guide', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='UserDataManagement.guide')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['range', 'semester'], name='allocation_range_sem_idx')],
                'unique_together': {('guide', 'semester', 'range')},
            },
        ),
        migrations.CreateModel(
            name='StudentInternship',
            fields=[
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('internship_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('semester', models.PositiveSmallIntegerField(choices=[(5, 'Semester 5'), (7, 'Semester 7')])),
                ('is_guide_manually_assigned', models.BooleanField(default=False)),
                ('guide', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='internships', to='UserDataManagement.guide')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='internships', to='UserDataManagement.student')),
            ],
            options={
                'ordering': ['student__student_id'],
                'indexes': [models.Index(fields=['guide'], name='internship_guide_idx')],
                'unique_together': {('student', 'semester')},
            },
        ),
    ]
