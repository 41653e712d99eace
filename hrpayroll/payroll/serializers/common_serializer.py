# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from payroll.models import PeriodType


class ActorSerializer(serializers.Serializer):
    actor_id = serializers.IntegerField(required=False, allow_null=True)


class DecisionSerializer(ActorSerializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class PeriodSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1900)
    month = serializers.IntegerField(min_value=1, max_value=12)
    period_type = serializers.ChoiceField(choices=PeriodType.choices)


class PeriodFilterSerializer(PeriodSerializer):
    employee_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=True)
    department = serializers.CharField(required=False, allow_blank=True, default="")


class PostingSerializer(PeriodFilterSerializer):
    actor_id = serializers.IntegerField(required=False, allow_null=True)
