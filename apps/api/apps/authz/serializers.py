"""
Account serializers: registration, login, profiles.

Wire field names are camelCase to match the browser client.
"""
import re
from rest_framework import serializers
from apps.authz.models import User


# Indian mobile numbers: optional +91/91/0 prefix, ten digits starting 6-9
MOBILE_NUMBER_PATTERN = re.compile(r'^(?:\+?91|0)?[6-9]\d{9}$')


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Minimal account payload returned by register/login/me.

    Used for:
    - POST /api/auth/register
    - POST /api/auth/login
    - GET /api/auth/me
    """
    fullName = serializers.CharField(source='full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'fullName']
        read_only_fields = fields


class PublicUserSerializer(serializers.ModelSerializer):
    """
    Public profile fields only. Never exposes password, email or mobile number.

    Embedded as ``uploadedBy`` in every note document.
    """
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'firstName', 'lastName', 'username']
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Serializer for account registration.

    Field rules:
    - firstName, lastName, qualification: required, trimmed
    - username: at least 3 characters
    - email: valid address
    - password: at least 6 characters
    - dateOfBirth: ISO date
    - mobileNumber: Indian mobile number

    Uniqueness of email, username and mobile number is checked in that
    order and the first conflict is reported.
    """
    firstName = serializers.CharField(source='first_name', max_length=150, error_messages={
        'blank': 'First name is required', 'required': 'First name is required'})
    lastName = serializers.CharField(source='last_name', max_length=150, error_messages={
        'blank': 'Last name is required', 'required': 'Last name is required'})
    username = serializers.CharField(min_length=3, max_length=150, error_messages={
        'min_length': 'Username must be at least 3 characters',
        'blank': 'Username must be at least 3 characters',
        'required': 'Username must be at least 3 characters'})
    email = serializers.EmailField(error_messages={
        'invalid': 'Invalid email', 'blank': 'Invalid email', 'required': 'Invalid email'})
    password = serializers.CharField(write_only=True, min_length=6, trim_whitespace=False, error_messages={
        'min_length': 'Password must be at least 6 characters',
        'blank': 'Password must be at least 6 characters',
        'required': 'Password must be at least 6 characters'})
    dateOfBirth = serializers.DateField(source='date_of_birth', error_messages={
        'invalid': 'Invalid date of birth', 'required': 'Invalid date of birth'})
    qualification = serializers.CharField(max_length=255, error_messages={
        'blank': 'Qualification is required', 'required': 'Qualification is required'})
    mobileNumber = serializers.CharField(source='mobile_number', max_length=20, error_messages={
        'blank': 'Invalid mobile number', 'required': 'Invalid mobile number'})

    def validate_mobileNumber(self, value):
        if not MOBILE_NUMBER_PATTERN.match(value):
            raise serializers.ValidationError('Invalid mobile number')
        return value

    def validate_email(self, value):
        return User.objects.normalize_email(value).lower()

    def validate(self, attrs):
        conflict = User.objects.find_conflict(
            email=attrs['email'],
            username=attrs['username'],
            mobile_number=attrs['mobile_number'],
        )
        if conflict:
            field, message = conflict
            wire_name = {'mobile_number': 'mobileNumber'}.get(field, field)
            raise serializers.ValidationError({wire_name: message})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    """Username (or email) and password."""
    username = serializers.CharField(error_messages={
        'blank': 'Username is required', 'required': 'Username is required'})
    password = serializers.CharField(trim_whitespace=False, error_messages={
        'blank': 'Password is required', 'required': 'Password is required'})


class ProfileSerializer(serializers.ModelSerializer):
    """
    Public profile with the user's ten most recent uploads.

    Used for:
    - GET /api/users/profile/{username}
    """
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    uploadedNotes = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'firstName', 'lastName', 'qualification', 'createdAt', 'uploadedNotes']
        read_only_fields = fields

    def get_uploadedNotes(self, obj):
        recent = obj.uploaded_notes.order_by('-created_at')[:10]
        return [
            {
                'id': str(note.id),
                'title': note.title,
                'subject': note.subject,
                'class': note.class_name,
                'createdAt': note.created_at.isoformat(),
                'downloadCount': note.download_count,
                'views': note.views,
            }
            for note in recent
        ]


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Self-service profile edit. Only names and qualification can change;
    other keys in the payload are ignored.

    Used for:
    - PUT /api/users/profile
    """
    firstName = serializers.CharField(source='first_name', max_length=150, required=False)
    lastName = serializers.CharField(source='last_name', max_length=150, required=False)
    qualification = serializers.CharField(max_length=255, required=False)

    class Meta:
        model = User
        fields = ['firstName', 'lastName', 'qualification']


class AccountSerializer(serializers.ModelSerializer):
    """The caller's own account, minus the password hash."""
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)
    mobileNumber = serializers.CharField(source='mobile_number', read_only=True)
    dateOfBirth = serializers.DateField(source='date_of_birth', read_only=True)
    isEmailVerified = serializers.BooleanField(source='is_email_verified', read_only=True)
    isMobileVerified = serializers.BooleanField(source='is_mobile_verified', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'firstName', 'lastName', 'mobileNumber',
            'dateOfBirth', 'qualification', 'isEmailVerified', 'isMobileVerified',
            'createdAt',
        ]
        read_only_fields = fields
