# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from payroll.models import PeriodSummary
from payroll.serializers.common_serializer import PeriodSerializer


class PeriodSummaryReadSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    period_label = serializers.CharField(read_only=True)
    full_period = serializers.CharField(read_only=True)
    late_under_hours = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    total_deductions = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_benefits = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PeriodSummary
        fields = [
            "id", "employee_id", "employee_no", "employee_name", "cost_center", "department", "line",
            "year", "month", "period_type", "period_start", "period_end", "period_label", "full_period",
            *PeriodSummary.TOTAL_FIELDS, *PeriodSummary.FLAG_FIELDS, "late_under_hours",
            *PeriodSummary.DEDUCTION_FIELDS, *PeriodSummary.BENEFIT_FIELDS,
            "total_deductions", "total_benefits",
            "status", "status_display", "generated_by", "posted_by", "posted_at", "locked_by", "locked_at",
            "notes", "created_at", "updated_at",
        ]


class SummaryGenerateSerializer(PeriodSerializer):
    employee_id = serializers.IntegerField()
    actor_id = serializers.IntegerField(required=False, allow_null=True)
