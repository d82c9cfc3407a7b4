from rest_framework import serializers

from clinical.models import User
from clinical.serializers.fields import CleanCharField


class UserCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=50)
    email = serializers.EmailField(max_length=100)
    password = serializers.CharField(min_length=6, max_length=100, write_only=True)
    firstName = CleanCharField(source='first_name', max_length=50)
    lastName = CleanCharField(source='last_name', max_length=50)
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES])
    phoneNumber = serializers.CharField(source='phone_number', max_length=20, required=False, allow_blank=True)

    def validate_username(self, v):
        v = v.strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v


class UserUpdateSerializer(serializers.Serializer):
    firstName = CleanCharField(source='first_name', max_length=50, required=False)
    lastName = CleanCharField(source='last_name', max_length=50, required=False)
    phoneNumber = serializers.CharField(source='phone_number', max_length=20, required=False, allow_blank=True)
    isActive = serializers.BooleanField(source='is_active', required=False)


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES], required=False)
