from rest_framework import serializers
from .models import Site


class SiteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Site
        fields = ['id', 'name', 'location', 'description', 'start_date', 'expected_end_date',
                  'status', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('expected_end_date', getattr(self.instance, 'expected_end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'expected_end_date': ['Expected end date cannot be before the start date.']})
        return attrs
