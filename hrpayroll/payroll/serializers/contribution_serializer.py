# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from payroll.models import Benefit, Deduction, Cutoff

BASE_FIELDS = ["id", "employee_id", "cutoff", "date", "date_posted", "is_posted", "is_default", "created_at", "updated_at"]


class BenefitReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Benefit
        fields = BASE_FIELDS + list(Benefit.AMOUNT_FIELDS)


class DeductionReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Deduction
        fields = BASE_FIELDS + list(Deduction.AMOUNT_FIELDS)


def _money():
    return serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)


class CutoffRecordCreateSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField()
    cutoff = serializers.ChoiceField(choices=Cutoff.choices)
    date = serializers.DateField()
    is_default = serializers.BooleanField(required=False, default=False)
    actor_id = serializers.IntegerField(required=False, allow_null=True)


class BenefitWriteSerializer(CutoffRecordCreateSerializer):
    mf_shares = _money()
    mf_loan = _money()
    sss_loan = _money()
    hmdf_loan = _money()
    hmdf_prem = _money()
    sss_prem = _money()
    philhealth = _money()
    allowances = _money()


class DeductionWriteSerializer(CutoffRecordCreateSerializer):
    advance = _money()
    charge_store = _money()
    charge = _money()
    meals = _money()
    miscellaneous = _money()
    other_deductions = _money()


class CopyFromDefaultSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField()
    cutoff = serializers.ChoiceField(choices=Cutoff.choices)
    date = serializers.DateField()
    actor_id = serializers.IntegerField(required=False, allow_null=True)
