from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from rest_framework import serializers

from custom_auth.models import ROLE_GUIDE, ROLE_STUDENT
from InternshipAllocation.range_utils import STUDENT_ID_PATTERN
from .models import Guide, Student, current_academic_year

User = get_user_model()


def _user_for(username, email, role, password):
    """Login account for a guide or student; password defaults to the username."""
    user, created = User.objects.get_or_create(
        username=username,
        defaults={"email": email, "role": role}
    )
    if created:
        user.set_password(password or username)
        user.save(update_fields=["password"])
    return user


'''
---------------------------------------------------------------------------------------------------------------------------------
                                            Guide creation
---------------------------------------------------------------------------------------------------------------------------------
'''


class GuideSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = Guide
        fields = [
            "id",
            "username",
            "guide_name",
            "email",
            "password",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_username(self, value):
        value = value.strip().lower()
        qs = Guide.all_objects.filter(username=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A guide with this username already exists.")
        return value

    def validate_email(self, value):
        value = value.strip().lower()
        qs = Guide.all_objects.filter(email=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A guide with this email already exists.")
        return value

    def validate(self, attrs):
        if self.instance is None:
            existing = User.objects.filter(username=attrs["username"]).first()
            if existing is not None and (
                str(existing.role).upper() != ROLE_GUIDE
                or Guide.all_objects.filter(user=existing).exists()
            ):
                raise serializers.ValidationError(
                    {"username": "This username belongs to another account."}
                )
            clash = User.objects.filter(email__iexact=attrs["email"]).exclude(username=attrs["username"])
        else:
            login_fields = Q()
            if "username" in attrs:
                login_fields |= Q(username__iexact=attrs["username"])
            if "email" in attrs:
                login_fields |= Q(email__iexact=attrs["email"])
            clash = User.objects.none()
            if login_fields:
                clash = User.objects.filter(login_fields).exclude(pk=self.instance.user_id)

        if clash.exists():
            raise serializers.ValidationError("This username or email is already used by another account.")
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        password = validated_data.pop("password", None)
        validated_data["user"] = _user_for(
            validated_data["username"], validated_data["email"], ROLE_GUIDE, password
        )
        return Guide.objects.create(**validated_data)

    @transaction.atomic
    def update(self, instance, validated_data):
        validated_data.pop("password", None)
        guide = super().update(instance, validated_data)

        # Login identifiers follow the profile
        if guide.user is not None:
            guide.user.username = guide.username
            guide.user.email = guide.email
            guide.user.save(update_fields=["username", "email"])
        return guide


'''
---------------------------------------------------------------------------------------------------------------------------------
                                            Student creation
---------------------------------------------------------------------------------------------------------------------------------
'''


class StudentSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = Student
        fields = [
            "id",
            "student_id",
            "student_name",
            "email",
            "semester",
            "year",
            "is_onboarded",
            "password",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "email", "created_at", "updated_at"]
        # Checked in validate()
        validators = []

    def validate_student_id(self, value):
        value = value.strip().lower()
        if not STUDENT_ID_PATTERN.match(value):
            raise serializers.ValidationError("Invalid student ID. Expected format: 22cs078")
        return value

    def validate(self, attrs):
        student_id = attrs.get("student_id", getattr(self.instance, "student_id", None))
        semester = attrs.get("semester", getattr(self.instance, "semester", None))
        year = attrs.get("year") or getattr(self.instance, "year", None) or current_academic_year()

        if self.instance:
            qs = Student.all_objects.filter(student_id=student_id, semester=semester, year=year)
            qs = qs.exclude(pk=self.instance.pk)
        else:
            # A soft-deleted record for the same key is restored by create()
            qs = Student.objects.filter(student_id=student_id, semester=semester, year=year)

            existing = User.objects.filter(username=student_id).first()
            if existing is not None and str(existing.role).upper() != ROLE_STUDENT:
                raise serializers.ValidationError(
                    {"student_id": "This student ID belongs to a non-student account."}
                )

        if qs.exists():
            raise serializers.ValidationError(
                "A student with this student_id already exists for this semester and year."
            )
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        password = validated_data.pop("password", None)
        student_id = validated_data["student_id"]
        validated_data["user"] = _user_for(
            student_id, f"{student_id}@{settings.STUDENT_EMAIL_DOMAIN}", ROLE_STUDENT, password
        )

        deleted = Student.all_objects.filter(
            student_id=student_id,
            semester=validated_data["semester"],
            year=validated_data.get("year") or current_academic_year(),
            is_deleted=True,
        ).first()
        if deleted is None:
            return Student.objects.create(**validated_data)

        for field, value in validated_data.items():
            setattr(deleted, field, value)
        deleted.is_deleted = False
        deleted.deleted_at = None
        deleted.save()
        return deleted

    def update(self, instance, validated_data):
        validated_data.pop("password", None)
        return super().update(instance, validated_data)
