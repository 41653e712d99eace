# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from payroll.models import FinalPayroll
from payroll.services.approval_service import next_payroll_action


class FinalPayrollReadSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    approval_status_display = serializers.CharField(source="get_approval_status_display", read_only=True)
    period_label = serializers.CharField(read_only=True)
    full_period = serializers.CharField(read_only=True)
    is_editable = serializers.BooleanField(read_only=True)
    next_action = serializers.SerializerMethodField()
    employee_id = serializers.IntegerField(read_only=True)
    payroll_summary_id = serializers.IntegerField(read_only=True)
    benefit_id = serializers.IntegerField(read_only=True)
    deduction_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = FinalPayroll
        exclude = ["employee", "payroll_summary", "benefit", "deduction"]

    @extend_schema_field(OpenApiTypes.STR)
    def get_next_action(self, obj):
        return next_payroll_action(obj)


class PayrollGenerateSerializer(serializers.Serializer):
    summary_id = serializers.IntegerField()
    actor_id = serializers.IntegerField(required=False, allow_null=True)


def _money():
    return serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)

def _qty(places: int = 2):
    return serializers.DecimalField(max_digits=8, decimal_places=places, required=False, min_value=0)


class PayrollAdjustSerializer(serializers.Serializer):
    actor_id = serializers.IntegerField(required=False, allow_null=True)
    hours_worked = _qty()
    absence_days = _qty(1)
    ot_rest_day_hours = _qty()
    other_earnings = _money()
    mf_shares = _money()
    mf_loan = _money()
    sss_loan = _money()
    hdmf_loan = _money()
    advance_deduction = _money()
    charge_store = _money()
    charge_deduction = _money()
    meals_deduction = _money()
    miscellaneous_deduction = _money()
    other_deductions = _money()
    calculation_notes = serializers.CharField(required=False, allow_blank=True)
