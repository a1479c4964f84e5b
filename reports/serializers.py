from __future__ import annotations

from rest_framework import serializers


class DateRangeSerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        df, dt = attrs.get("date_from"), attrs.get("date_to")
        if df and dt and df > dt:
            raise serializers.ValidationError({"date_to": "Must be on or after date_from."})
        return attrs
