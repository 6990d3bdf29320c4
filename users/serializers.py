from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from assessments.models import ExamAttempt

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    attempts_submitted = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'role', 'is_staff', 'bio', 'avatar', 'attempts_submitted']
        read_only_fields = ['email', 'role', 'is_staff']

    def get_attempts_submitted(self, obj):
        return ExamAttempt.objects.filter(student=obj, status=ExamAttempt.Status.SUBMITTED).count()


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ['email', 'first_name', 'last_name', 'password']

    def create(self, validated_data):
        # Self-registration always yields a student; staff roles are granted in the admin
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=validated_data['first_name'],
            last_name=validated_data['last_name'],
            role=User.Role.STUDENT,
        )
        return user


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data
