from rest_framework import serializers

from .models import CustomUser, Department


class DepartmentSerializer(serializers.ModelSerializer):
    """Lightweight serializer for Department model"""
    class Meta:
        model = Department
        fields = ['id', 'name']
        read_only_fields = ['id', 'name']


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact user representation embedded in approval and PR payloads"""
    role = serializers.CharField(source='role_code', read_only=True)

    class Meta:
        model = CustomUser
        fields = ['id', 'email', 'name', 'role', 'department']
        read_only_fields = fields


class UserProfileSerializer(serializers.ModelSerializer):
    """Current user's profile including role and department details"""
    role = serializers.CharField(source='role_code', read_only=True)
    role_name = serializers.CharField(source='job_role.name', read_only=True, default=None)
    department_details = DepartmentSerializer(source='department', read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'email', 'name', 'role', 'role_name',
            'department', 'department_details', 'is_super_user',
        ]
        read_only_fields = fields
