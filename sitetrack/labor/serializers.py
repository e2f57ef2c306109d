from rest_framework import serializers
from sitetrack.sites.models import Site
from .models import Worker, Attendance


class WorkerSerializer(serializers.ModelSerializer):
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all())

    class Meta:
        model = Worker
        fields = ['id', 'site_id', 'name', 'role', 'daily_wage', 'phone', 'join_date',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class AttendanceSerializer(serializers.ModelSerializer):
    worker_id = serializers.PrimaryKeyRelatedField(source='worker', queryset=Worker.objects.all())
    site_id = serializers.PrimaryKeyRelatedField(source='site', queryset=Site.objects.all(), required=False)
    worker_name = serializers.CharField(source='worker.name', read_only=True)

    class Meta:
        model = Attendance
        fields = ['id', 'worker_id', 'worker_name', 'site_id', 'date', 'present', 'hours_worked',
                  'notes', 'created_at']
        read_only_fields = ['created_at']

    def validate(self, attrs):
        worker = attrs.get('worker', getattr(self.instance, 'worker', None))
        site = attrs.get('site', getattr(self.instance, 'site', None))
        if worker is not None and site is None:
            attrs['site'] = worker.site
        elif worker is not None and site is not None and worker.site_id != site.pk:
            raise serializers.ValidationError({'site_id': ['Worker does not belong to this site.']})
        return attrs
