from rest_framework import serializers
from .models import Store


PROGRESS_BAR_BANDS = ('blue', 'yellow', 'orange', 'red')


class StoreSerializer(serializers.ModelSerializer):
    """Main serializer for stores."""

    class Meta:
        model = Store
        fields = [
            'id',
            'name',
            'code',
            'is_active',
            'progress_bar_config',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_code(self, value):
        return value.strip().upper()

    def validate_progress_bar_config(self, value):
        """Every band must be present as a non-negative day count."""
        if not isinstance(value, dict):
            raise serializers.ValidationError('Progress bar config must be an object.')

        missing = [band for band in PROGRESS_BAR_BANDS if band not in value]
        if missing:
            raise serializers.ValidationError(f"Missing bands: {', '.join(missing)}")

        for band in PROGRESS_BAR_BANDS:
            days = value[band]
            if not isinstance(days, int) or isinstance(days, bool) or days < 0:
                raise serializers.ValidationError(f"Band '{band}' must be a non-negative integer.")

        return {band: value[band] for band in PROGRESS_BAR_BANDS}
